# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Rack resolvers and their registry.

A rack resolver maps a host name to the network location (rack) it lives in.
Unknown hosts resolve to the default rack, resolution never fails.
"""
import logging
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional

from containerplacement.sdk import common

logger = logging.getLogger(__name__)

_REG = {}


class RackResolver(ABC):
    """Abstract host -> rack lookup."""

    @abstractmethod
    def resolve(self, host: str) -> str:
        """Return the rack of ``host``."""

    def resolve_all(self, hosts: Iterable[str]) -> List[str]:
        return [self.resolve(h) for h in hosts]


def register_rack_resolver(kind: str):
    """Decorator to register a rack resolver class."""
    def _wrap(cls):
        _REG[kind] = cls
        return cls
    return _wrap


def get_rack_resolver(kind: str, **kwargs) -> RackResolver:
    if kind not in _REG:
        raise ValueError(f"Unknown rack resolver '{kind}'. Available: {list(_REG)}")
    return _REG[kind](**kwargs)


@register_rack_resolver(common.RackResolverKind.static.value)
class StaticRackResolver(RackResolver):
    """Resolve racks from a fixed host -> rack table."""

    def __init__(self, topology: Optional[Mapping[str, str]] = None, default_rack: str = common.DEFAULT_RACK):
        self.topology = dict(topology or {})
        self.default_rack = default_rack

    def resolve(self, host: str) -> str:
        return self.topology.get(host, self.default_rack)


@register_rack_resolver(common.RackResolverKind.script.value)
class ScriptRackResolver(RackResolver):
    """
    Resolve racks by running a topology script.

    The script receives host names as arguments and prints one rack per host,
    whitespace separated, in the same order. At most ``max_args`` hosts are
    passed per invocation. If the script fails or prints fewer racks than
    hosts, the affected hosts fall back to the default rack.
    """

    def __init__(self, script: str, default_rack: str = common.DEFAULT_RACK,
                 max_args: int = common.DEFAULT_SCRIPT_MAX_ARGS, timeout: float = 30.0):
        if not script:
            raise ValueError("ScriptRackResolver requires a topology script")
        if max_args < 1:
            raise ValueError(f"max_args must be at least 1, got {max_args}")
        self.script = script
        self.default_rack = default_rack
        self.max_args = max_args
        self.timeout = timeout

    def _run(self, hosts: List[str]) -> List[str]:
        try:
            proc = subprocess.run(
                [self.script, *hosts],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Topology script %s failed for %d hosts, using %s: %s",
                           self.script, len(hosts), self.default_rack, exc)
            return [self.default_rack] * len(hosts)

        racks = proc.stdout.split()
        if len(racks) < len(hosts):
            logger.warning("Topology script %s returned %d racks for %d hosts",
                           self.script, len(racks), len(hosts))
            racks.extend([self.default_rack] * (len(hosts) - len(racks)))
        return racks[:len(hosts)]

    def resolve(self, host: str) -> str:
        return self._run([host])[0]

    def resolve_all(self, hosts: Iterable[str]) -> List[str]:
        hosts = list(hosts)
        racks: List[str] = []
        for start in range(0, len(hosts), self.max_args):
            racks.extend(self._run(hosts[start:start + self.max_args]))
        return racks


class CachingRackResolver(RackResolver):
    """Memoize another resolver; topology is assumed stable for the process lifetime."""

    def __init__(self, delegate: RackResolver):
        self.delegate = delegate
        self._cache: Dict[str, str] = {}
        self._lock = threading.Lock()

    def resolve(self, host: str) -> str:
        return self.resolve_all([host])[0]

    def resolve_all(self, hosts: Iterable[str]) -> List[str]:
        hosts = list(hosts)
        with self._lock:
            missing = [h for h in dict.fromkeys(hosts) if h not in self._cache]
        if missing:
            resolved = self.delegate.resolve_all(missing)
            with self._lock:
                self._cache.update(zip(missing, resolved))
        with self._lock:
            return [self._cache[h] for h in hosts]

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


def build_rack_resolver(resolver_config) -> RackResolver:
    """
    Build a resolver from the ``rack_resolver`` section of a placement config.
    """
    kind = resolver_config.get("kind", common.RackResolverKind.static.value)
    default_rack = resolver_config.get("default_rack") or common.DEFAULT_RACK
    if kind == common.RackResolverKind.script.value:
        if resolver_config.get("topology"):
            raise ValueError("rack_resolver.topology is only used by the static rack resolver")
        max_args = resolver_config.get("script_max_args")
        resolver = get_rack_resolver(
            kind,
            script=resolver_config.get("script"),
            default_rack=default_rack,
            max_args=common.DEFAULT_SCRIPT_MAX_ARGS if max_args is None else max_args,
        )
    else:
        resolver = get_rack_resolver(kind, topology=resolver_config.get("topology") or {}, default_rack=default_rack)
    if resolver_config.get("cache", True):
        resolver = CachingRackResolver(resolver)
    return resolver
