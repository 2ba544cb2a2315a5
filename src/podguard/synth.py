"""Synthesis runs — wire records, resolver, aggregator and synthesizers together.

A run is stateless: every call builds fresh documents from its inputs. Two
entry points exist for network policies, one per resolution mode, so a run
can never mix snapshot and broker answers.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from podguard.broker import BrokerClient
from podguard.identity import WorkloadIdentity
from podguard.observe.models import SyscallRecord, TrafficRecord
from podguard.policy.aggregator import Aggregation, aggregate, peer_ips
from podguard.policy.models import NetworkPolicy, SeccompProfile
from podguard.policy.network import synthesize_network_policy
from podguard.policy.seccomp import (
    build_profile,
    collect_syscalls,
    default_architectures,
)
from podguard.resolve import BrokerResolver, IdentityResolver

logger = logging.getLogger(__name__)


class SynthesisStatus(enum.Enum):
    """Whether a run had every input it needed."""

    OK = "ok"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class PolicySynthesis:
    """Outcome of one NetworkPolicy synthesis run."""

    policy: NetworkPolicy
    aggregation: Aggregation
    status: SynthesisStatus = SynthesisStatus.OK
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProfileSynthesis:
    """Outcome of one seccomp synthesis run."""

    profile: SeccompProfile
    invalid: tuple[str, ...] = ()


def synthesize_policy(
    workload: WorkloadIdentity,
    records: Iterable[TrafficRecord],
    resolver: IdentityResolver,
) -> PolicySynthesis:
    """Synthesize a NetworkPolicy with a synchronous resolver."""
    aggregation = aggregate(records, resolver)
    policy = synthesize_network_policy(
        workload, aggregation.ingress, aggregation.egress
    )
    return PolicySynthesis(policy=policy, aggregation=aggregation)


async def synthesize_policy_via_broker(
    workload: WorkloadIdentity,
    records: Iterable[TrafficRecord],
    client: BrokerClient,
    timeout: float | None = None,
) -> PolicySynthesis:
    """Synthesize a NetworkPolicy, resolving peers through the broker.

    Every distinct peer IP is resolved concurrently before aggregation
    starts. If the broker could not answer a single lookup, the policy is
    still returned (all peers fall back to IP blocks) but marked degraded.
    """
    records = list(records)
    resolver = BrokerResolver(client, timeout=timeout)
    table = await resolver.resolve_all(peer_ips(records))

    result = synthesize_policy(workload, records, table)
    if not resolver.all_lookups_failed:
        return result

    message = (
        f"All {resolver.lookups} identity lookup(s) against {client.base_url} "
        "failed; every peer was treated as external"
    )
    logger.warning(message)
    return PolicySynthesis(
        policy=result.policy,
        aggregation=result.aggregation,
        status=SynthesisStatus.DEGRADED,
        warnings=(message,),
    )


def synthesize_profile(
    records: Iterable[SyscallRecord],
    architectures: Sequence[str] | None = None,
) -> ProfileSynthesis:
    """Synthesize a seccomp profile and report the names that were dropped."""
    records = list(records)
    parsed = collect_syscalls(records)
    profile = build_profile(
        parsed.valid, architectures or default_architectures(records)
    )
    return ProfileSynthesis(profile=profile, invalid=parsed.invalid)
