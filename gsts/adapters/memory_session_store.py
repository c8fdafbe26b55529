"""
Memory Session Store Adapter - In-memory session storage (testing only).
"""

from typing import Dict, List, Optional
from gsts.ports.session_store_port import SessionStorePort
from gsts.domain.session import Session
from gsts.errors import CredentialsError


class MemorySessionStoreAdapter(SessionStorePort):
    """
    In-memory session storage.

    WARNING: Only for testing and embedding. Sessions are lost on exit.
    An empty store behaves like a missing profile file.
    """

    def __init__(self):
        """Initialize in-memory storage."""
        self._sessions: Dict[str, Session] = {}

    def save(self, profile: str, session: Session) -> None:
        """Store a session in memory."""
        self._sessions[profile] = session.with_profile(profile)

    def load(self, profile: str, expected_role_arn: Optional[str] = None) -> Session:
        """Get a session from memory."""
        if not self._sessions:
            raise CredentialsError.not_found("<memory>")

        session = self._sessions.get(profile)
        if session is None:
            raise CredentialsError.profile_not_found(profile)

        if expected_role_arn and session.role.role_arn != expected_role_arn:
            raise CredentialsError.role_mismatch(profile, session.role.role_arn, expected_role_arn)

        return session

    def profiles(self) -> List[str]:
        """List stored profile names."""
        return sorted(self._sessions)
