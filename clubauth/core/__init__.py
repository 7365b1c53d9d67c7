"""Core utilities: password hashing, tokens and middleware."""
