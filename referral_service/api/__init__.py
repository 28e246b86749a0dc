"""
API layer for the referral service.

Exposes HTTP endpoints under /api/v1/referrals (registration with referral
codes, own record lookup, leaderboard neighbours, top user).
"""
