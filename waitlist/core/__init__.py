"""
Core utilities shared across the waitlist API.

This package hosts configuration, logging setup, the SMTP notifier and the
signup cooldown limiter. Services depend on these primitives instead of
reading the environment or opening sockets themselves.
"""
