"""podguard — synthesize NetworkPolicy and seccomp profiles from observed pod behaviour."""

__version__ = "0.1.0"
