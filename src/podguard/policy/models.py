"""Policy document models — immutable dataclasses for the synthesized documents."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from podguard.identity import Labels

NETWORK_POLICY_API_VERSION = "networking.k8s.io/v1"
SECCOMP_PROFILE_API_VERSION = "security.kubernetes.io/v1alpha1"
NAMESPACE_NAME_LABEL = "kubernetes.io/metadata.name"


# ---------------------------------------------------------------------------
# NetworkPolicy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PortSpec:
    """A protocol/port pair a rule allows."""

    protocol: str
    port: int | str


@dataclass(frozen=True)
class IPBlock:
    cidr: str
    except_: tuple[str, ...] = ()


@dataclass(frozen=True)
class LabelSelector:
    match_labels: Labels = ()


@dataclass(frozen=True)
class Peer:
    """One entry of a rule's ``from``/``to`` list.

    Either ``ip_block`` is set, or ``pod_selector`` optionally paired with a
    ``namespace_selector``.
    """

    ip_block: IPBlock | None = None
    pod_selector: LabelSelector | None = None
    namespace_selector: LabelSelector | None = None


@dataclass(frozen=True)
class Rule:
    """An ingress or egress rule: who may talk, and on which ports."""

    peers: tuple[Peer, ...] = ()
    ports: tuple[PortSpec, ...] = ()


@dataclass(frozen=True)
class ObjectMeta:
    name: str
    namespace: str


@dataclass(frozen=True)
class NetworkPolicySpec:
    pod_selector: LabelSelector
    ingress: tuple[Rule, ...] = ()
    egress: tuple[Rule, ...] = ()

    @property
    def policy_types(self) -> tuple[str, ...]:
        """Derived from the rule lists; present iff the list is non-empty."""
        types: list[str] = []
        if self.ingress:
            types.append("Ingress")
        if self.egress:
            types.append("Egress")
        return tuple(types)


@dataclass(frozen=True)
class NetworkPolicy:
    metadata: ObjectMeta
    spec: NetworkPolicySpec
    api_version: str = NETWORK_POLICY_API_VERSION
    kind: str = "NetworkPolicy"


# ---------------------------------------------------------------------------
# SeccompProfile
# ---------------------------------------------------------------------------


class SeccompAction(enum.Enum):
    """Action the kernel takes for a matching syscall."""

    ALLOW = "SCMP_ACT_ALLOW"
    ERRNO = "SCMP_ACT_ERRNO"
    KILL = "SCMP_ACT_KILL"
    KILL_PROCESS = "SCMP_ACT_KILL_PROCESS"
    KILL_THREAD = "SCMP_ACT_KILL_THREAD"
    LOG = "SCMP_ACT_LOG"
    TRACE = "SCMP_ACT_TRACE"
    TRAP = "SCMP_ACT_TRAP"

    @property
    def description(self) -> str:
        return _ACTION_DESCRIPTIONS[self]


# From https://kubernetes.io/docs/reference/node/seccomp/
_ACTION_DESCRIPTIONS = {
    SeccompAction.ALLOW: "Allow the syscall to be executed",
    SeccompAction.ERRNO: "Return an error code (reject syscall)",
    SeccompAction.KILL: "Kill only the thread",
    SeccompAction.KILL_PROCESS: "Kill the entire process",
    SeccompAction.KILL_THREAD: "Kill only the thread",
    SeccompAction.LOG: "Allow the syscall and log it to syslog or auditd",
    SeccompAction.TRACE: "Notify a tracing process with the specified value",
    SeccompAction.TRAP: "Throw a SIGSYS signal",
}

ARCHITECTURES = (
    "SCMP_ARCH_X86_64",
    "SCMP_ARCH_X86",
    "SCMP_ARCH_X32",
    "SCMP_ARCH_ARM",
    "SCMP_ARCH_AARCH64",
    "SCMP_ARCH_MIPS",
    "SCMP_ARCH_MIPS64",
    "SCMP_ARCH_MIPS64N32",
    "SCMP_ARCH_MIPSEL",
    "SCMP_ARCH_MIPSEL64",
    "SCMP_ARCH_MIPSEL64N32",
    "SCMP_ARCH_PPC",
    "SCMP_ARCH_PPC64",
    "SCMP_ARCH_PPC64LE",
    "SCMP_ARCH_S390",
    "SCMP_ARCH_S390X",
)


@dataclass(frozen=True)
class SyscallRule:
    """A group of syscall names sharing one action."""

    names: tuple[str, ...]
    action: SeccompAction


@dataclass(frozen=True)
class SeccompProfile:
    default_action: SeccompAction = SeccompAction.ERRNO
    architectures: tuple[str, ...] = ()
    syscalls: tuple[SyscallRule, ...] = field(default_factory=tuple)
