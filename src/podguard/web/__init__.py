"""HTTP API exposing the synthesis engine (optional ``web`` extra)."""
