"""
Authentication module for the student club portal.

This module provides:
- Enrollment number lookup (signup vs login)
- Email verification links
- Password signup after email verification
- Email + password login with JWT session tokens
"""
