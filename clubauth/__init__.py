"""
Club authentication service.

Verifies institutional enrollment numbers, links them to email identities,
registers passwords and issues session tokens for the club portal.
"""

__version__ = "1.0.0"
