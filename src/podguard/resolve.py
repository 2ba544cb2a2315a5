"""IP-to-identity resolution for observed peers.

Resolves peer IP addresses to an in-cluster Service, an in-cluster Pod or an
external address, in that strict order:

1. Service owning the IP (virtual service IPs must never be mistaken for an
   endpoint)
2. Pod owning the IP
3. External, the fallback for everything else

Two modes exist and a synthesis run uses exactly one of them:

- :class:`SnapshotResolver` answers from a local snapshot of known pods and
  services (synchronous, no I/O).
- :class:`BrokerResolver` asks the broker once per distinct IP, concurrently,
  and hands back an :class:`IdentityTable` for aggregation.

Lookup misses, errors and timeouts all resolve to External; resolution
never raises for a bad IP.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

import httpx

from podguard.broker import BrokerClient
from podguard.identity import EXTERNAL, PeerIdentity, PodInfo, ServiceInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IdentityResolver(Protocol):
    """Anything that maps a peer IP to a :class:`PeerIdentity`."""

    def resolve(self, ip: str | None) -> PeerIdentity:
        ...


@dataclass(frozen=True)
class IdentityTable:
    """Frozen IP → identity answers collected for one synthesis run."""

    identities: Mapping[str, PeerIdentity] = field(default_factory=dict)

    def resolve(self, ip: str | None) -> PeerIdentity:
        if not ip:
            return EXTERNAL
        return self.identities.get(ip, EXTERNAL)

    def __len__(self) -> int:
        return len(self.identities)


@dataclass
class SnapshotResolver:
    """Resolves IPs against a snapshot of known pods and services.

    All results are cached for the lifetime of the resolver instance, which
    should be one synthesis run.
    """

    services_by_ip: dict[str, ServiceInfo] = field(default_factory=dict)
    pods_by_ip: dict[str, PodInfo] = field(default_factory=dict)
    pods_by_name: dict[str, PodInfo] = field(default_factory=dict)
    _cache: dict[str, PeerIdentity] = field(default_factory=dict)

    @classmethod
    def from_snapshot(
        cls,
        pods: Iterable[PodInfo] = (),
        services: Iterable[ServiceInfo] = (),
    ) -> SnapshotResolver:
        resolver = cls()
        for svc in services:
            if svc.ip and svc.name:
                resolver.services_by_ip.setdefault(svc.ip, svc)
        for pod in pods:
            if pod.ip and pod.name:
                resolver.pods_by_ip.setdefault(pod.ip, pod)
            if pod.name:
                resolver.pods_by_name.setdefault(pod.name, pod)
        return resolver

    def resolve(self, ip: str | None) -> PeerIdentity:
        """Resolve an IP address to a peer identity."""
        if not ip:
            return EXTERNAL
        if ip in self._cache:
            return self._cache[ip]

        identity = self._do_resolve(ip)
        self._cache[ip] = identity
        return identity

    def lookup_workload_labels(self, name: str) -> dict[str, str] | None:
        pod = self.pods_by_name.get(name)
        if pod is None:
            return None
        return pod.selector_labels or None

    def _do_resolve(self, ip: str) -> PeerIdentity:
        svc = self.services_by_ip.get(ip)
        if svc is not None:
            labels = dict(svc.selector) or self.lookup_workload_labels(svc.name)
            return PeerIdentity.service(svc.name, svc.namespace, labels)

        pod = self.pods_by_ip.get(ip)
        if pod is not None:
            return PeerIdentity.pod(pod.name, pod.namespace, pod.selector_labels)

        logger.debug("No pod or service known for %s, treating as external", ip)
        return EXTERNAL


class BrokerResolver:
    """Resolves IPs through the broker, one request chain per distinct IP.

    Concurrent requests for the same IP share a single in-flight task, and
    the first answer for an IP is the one every caller sees. Each lookup is
    bounded by ``timeout`` seconds; a timeout counts as a miss.
    """

    def __init__(self, client: BrokerClient, timeout: float | None = None) -> None:
        self._client = client
        self._timeout = timeout if timeout is not None else client.timeout
        self._tasks: dict[str, asyncio.Task[PeerIdentity]] = {}
        self.lookups = 0
        self.failures = 0

    @property
    def all_lookups_failed(self) -> bool:
        """Whether every lookup so far failed at the transport level."""
        return self.lookups > 0 and self.failures == self.lookups

    async def resolve(self, ip: str | None) -> PeerIdentity:
        if not ip:
            return EXTERNAL
        task = self._tasks.get(ip)
        if task is None:
            task = asyncio.ensure_future(self._do_resolve(ip))
            self._tasks[ip] = task
        return await task

    async def resolve_all(self, ips: Iterable[str | None]) -> IdentityTable:
        """Resolve every distinct IP concurrently and freeze the answers."""
        unique = list(dict.fromkeys(ip for ip in ips if ip))
        results = await asyncio.gather(*(self.resolve(ip) for ip in unique))
        return IdentityTable(dict(zip(unique, results)))

    async def _do_resolve(self, ip: str) -> PeerIdentity:
        svc = await self._guarded(self._client.lookup_service(ip), "service", ip)
        if svc is not None:
            labels = dict(svc.selector) or await self._guarded(
                self._client.lookup_workload_labels(svc.name), "labels", svc.name
            )
            return PeerIdentity.service(svc.name, svc.namespace, labels)

        pod = await self._guarded(self._client.lookup_pod(ip), "pod", ip)
        if pod is not None:
            return PeerIdentity.pod(pod.name, pod.namespace, pod.selector_labels)

        return EXTERNAL

    async def _guarded(self, lookup: Awaitable[T | None], what: str, key: str) -> T | None:
        self.lookups += 1
        try:
            return await asyncio.wait_for(lookup, timeout=self._timeout)
        except asyncio.TimeoutError:
            self.failures += 1
            logger.debug("%s lookup for %s timed out after %ss", what, key, self._timeout)
        except httpx.HTTPError as exc:
            self.failures += 1
            logger.debug("%s lookup for %s failed: %s", what, key, exc)
        except (AttributeError, TypeError, ValueError) as exc:
            # Reply decoded but had the wrong shape.
            self.failures += 1
            logger.debug("%s lookup for %s returned a malformed reply: %s", what, key, exc)
        return None
