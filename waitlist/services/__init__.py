"""
High-level use cases for the waitlist API.

Routers call WaitlistService instead of touching the store, the SMTP session
or the cooldown map directly.
"""
