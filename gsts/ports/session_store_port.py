"""
Session Store Port - Interface for session persistence.

Implementations:
- IniSessionStoreAdapter: Flat INI profile file
- MemorySessionStoreAdapter: In-memory store (testing only)
"""

from abc import ABC, abstractmethod
from typing import Optional
from gsts.domain.session import Session


class SessionStorePort(ABC):
    """Port: Persist sessions by profile name."""

    @abstractmethod
    def save(self, profile: str, session: Session) -> None:
        """
        Store a session under a profile, replacing that profile only.

        Args:
            profile: Profile name
            session: Session to store
        """
        pass

    @abstractmethod
    def load(self, profile: str, expected_role_arn: Optional[str] = None) -> Session:
        """
        Load the session stored under a profile.

        Args:
            profile: Profile name
            expected_role_arn: Role ARN the session must belong to

        Returns:
            Stored session (possibly expired; see Session.is_valid)

        Raises:
            CredentialsError: NOT_FOUND if the store does not exist,
                PROFILE_NOT_FOUND if the profile is absent, ROLE_MISMATCH if
                the session belongs to a different role
        """
        pass
