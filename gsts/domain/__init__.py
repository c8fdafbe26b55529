"""
Domain Models - Pure business entities.

No infrastructure dependencies. Domain logic only.
"""

from gsts.domain.role import Role
from gsts.domain.session import Session, TemporaryCredentials, EXPIRATION_DELTA
from gsts.domain.assertion import AssertionParser, ParsedAssertion
from gsts.domain.resolver import RoleResolution, resolve_role, sort_roles

__all__ = [
    "Role",
    "Session",
    "TemporaryCredentials",
    "EXPIRATION_DELTA",
    "AssertionParser",
    "ParsedAssertion",
    "RoleResolution",
    "resolve_role",
    "sort_roles",
]
