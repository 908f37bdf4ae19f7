"""Rate limiting adapters.

Starts with an in-process limiter; a shared store (Redis) can be added
behind ``AbstractRateLimiter`` without touching the signup workflow.
"""
