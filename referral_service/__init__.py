"""
Referral Service Application - root package.

This package contains the FastAPI app entry point (main.py), API routes,
domain logic for referral codes and points ranking, and infrastructure
(MongoDB, enrollment email).
"""
