"""Session tokens (JWT via python-jose)."""
