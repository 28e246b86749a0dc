"""
Domain layer: user model, leaderboard queries, repository contracts and
the referral service exception hierarchy. No framework dependencies.
"""
