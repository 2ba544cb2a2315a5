"""REST API for seccomp profile synthesis."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from podguard.identity import DEFAULT_NAMESPACE
from podguard.observe.models import SyscallRecord
from podguard.policy.serialize import (
    seccomp_profile_to_dict,
    seccomp_profile_to_json,
    seccomp_profile_to_yaml,
)
from podguard.synth import synthesize_profile

router = APIRouter(tags=["seccomp"])


class SeccompRequest(BaseModel):
    name: str
    namespace: str = DEFAULT_NAMESPACE
    syscalls: list[dict[str, Any]] = Field(default_factory=list)
    architectures: list[str] = Field(default_factory=list)


@router.post("/seccomp")
async def create_seccomp_profile(body: SeccompRequest):
    records = [SyscallRecord.from_broker(s) for s in body.syscalls]
    result = synthesize_profile(records, body.architectures or None)
    return {
        "profile": seccomp_profile_to_dict(result.profile),
        "yaml": seccomp_profile_to_yaml(result.profile, body.name, body.namespace),
        "json": seccomp_profile_to_json(result.profile),
        "invalid": list(result.invalid),
    }
