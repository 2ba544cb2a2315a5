"""REST API for syscall name lookups."""

from __future__ import annotations

from fastapi import APIRouter, Query

from podguard import syscalls as registry

router = APIRouter(tags=["syscalls"])


@router.get("/syscalls/suggest")
async def suggest_syscalls(
    q: str = Query(""),
    limit: int = Query(10, ge=1, le=100),
):
    return {"suggestions": registry.suggest(q, limit)}


@router.get("/syscalls/validate")
async def validate_syscalls(names: str = Query("")):
    parsed = registry.parse(names)
    return {"valid": list(parsed.valid), "invalid": list(parsed.invalid)}
