"""
Application layer: DTOs, referral use cases and the pluggable services they
depend on (code generation, points award policy, enrollment notification).
"""
