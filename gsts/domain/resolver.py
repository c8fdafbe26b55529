"""
Role Resolver - Picks the role to assume among those offered by an assertion.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional
from gsts.domain.role import Role
from gsts.errors import CredentialsError


@dataclass(frozen=True)
class RoleResolution:
    """
    Outcome of role resolution.

    role_to_assume is None when more than one role is available and none was
    requested; the caller must then disambiguate from available_roles.
    """
    role_to_assume: Optional[Role]
    available_roles: List[Role]


def sort_roles(roles: Iterable[Role]) -> List[Role]:
    """Sort roles by role ARN so listings are stable across calls."""
    return sorted(roles, key=lambda role: role.role_arn)


def resolve_role(roles: Iterable[Role], requested_role_arn: Optional[str] = None) -> RoleResolution:
    """
    Resolve the role to assume.

    Matching is an exact, case-sensitive comparison on the full role ARN.

    Args:
        roles: Roles parsed from the assertion
        requested_role_arn: Role ARN requested by the caller, if any

    Returns:
        Resolution with the complete, sorted list of available roles

    Raises:
        CredentialsError: ROLE_NOT_FOUND (carrying every available role) if
            the requested ARN is not among them
    """
    available_roles = sort_roles(roles)

    if not requested_role_arn:
        return RoleResolution(
            role_to_assume=available_roles[0] if len(available_roles) == 1 else None,
            available_roles=available_roles,
        )

    for role in available_roles:
        if role.role_arn == requested_role_arn:
            return RoleResolution(role_to_assume=role, available_roles=available_roles)

    raise CredentialsError.role_not_found(available_roles, requested_role_arn)
