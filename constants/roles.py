"""
Role names carried in the `roles` claim of admin access tokens.
"""

ADMIN = "ADMIN"
STAFF = "STAFF"
