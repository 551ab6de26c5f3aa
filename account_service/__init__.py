"""
Account service.

REST API for user accounts:
- Registration and login
- JWT token issuance, verification and refresh
- Role and ownership based access control
- Admin-gated user management
"""
