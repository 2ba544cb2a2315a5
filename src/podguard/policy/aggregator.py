"""Peer/port aggregation — collapse flow samples into one candidate rule per peer."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from podguard.identity import DEFAULT_NAMESPACE, PeerIdentity, PeerKind
from podguard.observe.models import DEFAULT_PROTOCOL, Direction, TrafficRecord
from podguard.resolve import IdentityResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeerKey:
    """Grouping key for one peer in one direction.

    Named peers are keyed by kind, name and namespace; external peers by
    their IP so that distinct addresses stay distinct rules.
    """

    direction: Direction
    kind: PeerKind
    name: str = ""
    namespace: str = ""
    ip: str | None = None

    @classmethod
    def for_peer(
        cls, direction: Direction, identity: PeerIdentity, ip: str
    ) -> PeerKey:
        if identity.is_external:
            return cls(direction, PeerKind.EXTERNAL, ip=ip)
        return cls(
            direction,
            identity.kind,
            identity.name,
            identity.namespace or DEFAULT_NAMESPACE,
        )


@dataclass
class AggregatedRule:
    """A candidate rule: one peer and every (protocol, port) seen for it."""

    key: PeerKey
    identity: PeerIdentity
    peer_ip: str
    # Insertion-ordered set of (protocol, port).
    _ports: dict[tuple[str, str], None] = field(default_factory=dict)
    count: int = 0

    def add(self, protocol: str, port: str) -> None:
        self._ports[(protocol, port)] = None
        self.count += 1

    @property
    def ports(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._ports)


@dataclass(frozen=True)
class Aggregation:
    """Aggregated candidate rules, in first-seen order."""

    ingress: tuple[AggregatedRule, ...] = ()
    egress: tuple[AggregatedRule, ...] = ()


def peer_ips(records: Iterable[TrafficRecord]) -> list[str]:
    """Distinct non-empty peer IPs, in first-seen order."""
    return list(dict.fromkeys(r.peer_ip for r in records if r.peer_ip))


def aggregate(
    records: Iterable[TrafficRecord],
    resolver: IdentityResolver,
) -> Aggregation:
    """Group traffic records by direction and resolved peer identity.

    Every distinct peer IP is resolved exactly once. Records without a peer
    IP or a direction carry no rule information and are skipped. The number
    of rules depends only on the distinct peers observed, never on how many
    samples describe them.
    """
    records = list(records)
    identities = {ip: resolver.resolve(ip) for ip in peer_ips(records)}

    buckets: dict[Direction, dict[PeerKey, AggregatedRule]] = {
        Direction.INGRESS: {},
        Direction.EGRESS: {},
    }
    skipped = 0

    for record in records:
        if not record.peer_ip or record.direction is None:
            skipped += 1
            continue

        identity = identities[record.peer_ip]
        key = PeerKey.for_peer(record.direction, identity, record.peer_ip)
        bucket = buckets[record.direction]
        rule = bucket.get(key)
        if rule is None:
            rule = AggregatedRule(key=key, identity=identity, peer_ip=record.peer_ip)
            bucket[key] = rule

        protocol = (record.protocol or DEFAULT_PROTOCOL).upper()
        rule.add(protocol, record.rule_port)

    if skipped:
        logger.debug("Skipped %d record(s) without a peer IP or direction", skipped)

    return Aggregation(
        ingress=tuple(buckets[Direction.INGRESS].values()),
        egress=tuple(buckets[Direction.EGRESS].values()),
    )
