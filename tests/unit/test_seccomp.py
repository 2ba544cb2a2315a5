"""Tests for seccomp profile synthesis."""

from __future__ import annotations

from unittest.mock import patch

from podguard.observe.models import SyscallRecord
from podguard.policy.models import SeccompAction
from podguard.policy.seccomp import (
    architectures_for,
    build_profile,
    collect_syscalls,
    default_architectures,
    synthesize_seccomp_profile,
)

X86 = ("SCMP_ARCH_X86_64", "SCMP_ARCH_X86", "SCMP_ARCH_X32")


class TestSynthesis:
    def test_sorted_deduplicated_allow_list(self):
        records = [
            SyscallRecord("read,write,read", "x86_64"),
            SyscallRecord("read,openat", "x86_64"),
        ]
        profile = synthesize_seccomp_profile(records)
        assert profile.default_action is SeccompAction.ERRNO
        assert len(profile.syscalls) == 1
        assert profile.syscalls[0].names == ("openat", "read", "write")
        assert profile.syscalls[0].action is SeccompAction.ALLOW

    def test_invalid_names_never_emitted(self):
        profile = synthesize_seccomp_profile([SyscallRecord("open,INVALID_X,close")])
        names = profile.syscalls[0].names
        assert names == ("close", "open")
        assert "INVALID_X" not in names and "invalid_x" not in names

    def test_mixed_case_names_collapse(self):
        profile = synthesize_seccomp_profile([SyscallRecord("READ,read, Read ")])
        assert profile.syscalls[0].names == ("read",)

    def test_empty_input_denies_all(self):
        profile = synthesize_seccomp_profile([], architectures=X86)
        assert profile.syscalls == ()
        assert profile.default_action is SeccompAction.ERRNO

    def test_only_invalid_names(self):
        assert synthesize_seccomp_profile([SyscallRecord("bogus")], X86).syscalls == ()

    def test_explicit_architectures(self):
        profile = synthesize_seccomp_profile(
            [SyscallRecord("read", "x86_64")], architectures=["SCMP_ARCH_AARCH64"]
        )
        assert profile.architectures == ("SCMP_ARCH_AARCH64",)


class TestCollect:
    def test_invalid_tracked_once(self):
        parsed = collect_syscalls(
            [SyscallRecord("read,bogus"), SyscallRecord("bogus,other_bogus")]
        )
        assert parsed.valid == ("read",)
        assert parsed.invalid == ("bogus", "other_bogus")


class TestArchitectures:
    def test_from_records(self):
        assert default_architectures([SyscallRecord("read", "x86_64")]) == X86

    def test_arm(self):
        assert default_architectures([SyscallRecord("read", "arm64")]) == (
            "SCMP_ARCH_AARCH64",
            "SCMP_ARCH_ARM",
        )

    def test_multiple_records_dedupe(self):
        records = [SyscallRecord("read", "x86_64"), SyscallRecord("write", "amd64")]
        assert default_architectures(records) == X86

    def test_host_fallback(self):
        with patch("podguard.policy.seccomp.platform.machine", return_value="aarch64"):
            assert default_architectures([]) == ("SCMP_ARCH_AARCH64", "SCMP_ARCH_ARM")

    def test_unknown_host_falls_back_to_x86(self):
        with patch("podguard.policy.seccomp.platform.machine", return_value="vax"):
            assert default_architectures([SyscallRecord("read", "pdp11")]) == X86

    def test_lookup_case_insensitive(self):
        assert architectures_for(" X86_64 ") == X86
        assert architectures_for("sparc") is None


def test_build_profile_dedupes():
    profile = build_profile(["write", "read", "write"], X86)
    assert profile.syscalls[0].names == ("read", "write")
