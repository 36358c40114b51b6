"""Redis-backed task worker executing shell and docker commands."""
