"""Exception hierarchy for podguard."""

from __future__ import annotations


class PodguardError(Exception):
    """Base class for podguard errors."""


class BrokerError(PodguardError):
    """A required fetch from the telemetry broker failed."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
