"""
Licenses module - License management.

This module handles:
- License entity and its lifecycle (issue, check, expire, revoke, reactivate, extend)
- License key generation
- Issuance and extension policies
"""
