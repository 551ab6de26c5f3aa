"""
Authentication and authorization for the account service.

This module provides:
- Password hashing and verification
- JWT token handling
- Login and token refresh
- Request gates for authentication, roles and ownership
"""
