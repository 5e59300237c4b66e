"""
auth — User registration and login.

Provides:
  • Signup / login credential validation
  • bcrypt password hashing (``SALT_ROUNDS`` cost factor)
  • Registration and authentication workflows
  • Signed session cookies and the ``require_user`` FastAPI dependency
"""
