"""Access bounded context.

Owns tenants, users, the fixed role hierarchy and the invitation lifecycle,
and decides who may manage whom.
"""
