"""Authentication and authorization.

Learn: Users log in with email/password and receive two JWTs:
1. Access token → `Authorization: Bearer <token>` on every API call
2. Refresh token → HttpOnly cookie, exchanged at /auth/refresh

Routes gate themselves with one of two dependencies, require_auth or
require_admin (see dependencies.py). Role checks live nowhere else.
"""
