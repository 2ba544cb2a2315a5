"""Seccomp profile synthesis — an allow-list of every valid syscall observed."""

from __future__ import annotations

import logging
import platform
from collections.abc import Iterable, Sequence

from podguard import syscalls
from podguard.observe.models import SyscallRecord
from podguard.policy.models import SeccompAction, SeccompProfile, SyscallRule

logger = logging.getLogger(__name__)

_X86_FAMILY = ("SCMP_ARCH_X86_64", "SCMP_ARCH_X86", "SCMP_ARCH_X32")
_ARM_FAMILY = ("SCMP_ARCH_AARCH64", "SCMP_ARCH_ARM")

# Machine name (as reported by uname or the node agent) -> seccomp arches,
# 64-bit variant first.
_ARCH_FAMILIES: dict[str, tuple[str, ...]] = {
    "x86_64": _X86_FAMILY,
    "amd64": _X86_FAMILY,
    "aarch64": _ARM_FAMILY,
    "arm64": _ARM_FAMILY,
    "ppc64le": ("SCMP_ARCH_PPC64LE",),
    "s390x": ("SCMP_ARCH_S390X", "SCMP_ARCH_S390"),
}


def architectures_for(machine: str) -> tuple[str, ...] | None:
    """Seccomp architecture list for a machine name, or None if unknown."""
    return _ARCH_FAMILIES.get(machine.strip().lower())


def default_architectures(records: Sequence[SyscallRecord] = ()) -> tuple[str, ...]:
    """Architectures reported by the telemetry, else the host's, else x86."""
    arches: list[str] = []
    for record in records:
        if not record.architecture:
            continue
        family = architectures_for(record.architecture)
        if family is None:
            logger.warning(
                "Unknown architecture %r in syscall telemetry, ignoring",
                record.architecture,
            )
            continue
        arches.extend(family)
    if arches:
        return tuple(dict.fromkeys(arches))

    return architectures_for(platform.machine()) or _X86_FAMILY


def collect_syscalls(records: Iterable[SyscallRecord]) -> syscalls.ParsedSyscalls:
    """Validate every observed syscall name.

    Returns the valid names sorted and deduplicated, and the invalid names
    deduplicated in first-seen order.
    """
    valid: set[str] = set()
    invalid: dict[str, None] = {}
    for record in records:
        parsed = syscalls.parse(record.syscall_names)
        valid.update(parsed.valid)
        invalid.update(dict.fromkeys(parsed.invalid))

    if invalid:
        logger.warning(
            "Dropping %d unrecognized syscall name(s): %s",
            len(invalid),
            ", ".join(invalid),
        )
    return syscalls.ParsedSyscalls(valid=tuple(sorted(valid)), invalid=tuple(invalid))


def build_profile(
    names: Iterable[str],
    architectures: Sequence[str],
) -> SeccompProfile:
    """Deny-by-default profile with a single allow rule for *names*.

    No names yields a profile with no syscall rules, which denies all.
    """
    unique = tuple(sorted(set(names)))
    rules: tuple[SyscallRule, ...] = ()
    if unique:
        rules = (SyscallRule(names=unique, action=SeccompAction.ALLOW),)

    return SeccompProfile(
        default_action=SeccompAction.ERRNO,
        architectures=tuple(architectures),
        syscalls=rules,
    )


def synthesize_seccomp_profile(
    records: Iterable[SyscallRecord],
    architectures: Sequence[str] | None = None,
) -> SeccompProfile:
    """Build a profile allowing every valid syscall observed in *records*."""
    records = list(records)
    return build_profile(
        collect_syscalls(records).valid,
        architectures or default_architectures(records),
    )
