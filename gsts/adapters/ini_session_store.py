"""
INI Session Store Adapter - Profile file storage for sessions.

One section per profile, holding the flattened session fields. Writing a
profile replaces that section only; other profiles are kept as they are.
No file locking is performed: concurrent writers race and the last one wins.
"""

from configparser import RawConfigParser
from pathlib import Path
from typing import Optional, Union
import logging
import os
import tempfile

from gsts.ports.session_store_port import SessionStorePort
from gsts.domain.session import Session
from gsts.errors import CredentialsError

log = logging.getLogger(__name__)

NO_DEFAULT_SECTION = "\0gsts-no-default"


class IniSessionStoreAdapter(SessionStorePort):
    """
    INI file-backed session storage.

    The file is written atomically (temporary file + rename) with owner-only
    permissions where POSIX permission bits are supported.
    """

    def __init__(self, path: Union[str, Path], logger: Optional[logging.Logger] = None):
        """
        Initialize INI session store.

        Args:
            path: Profile file path (created on first save)
            logger: Logger for diagnostics
        """
        self._path = Path(path).expanduser()
        self._logger = logger or log

    @property
    def path(self) -> Path:
        return self._path

    def _parser(self) -> RawConfigParser:
        # No inline comments: tokens and assertions may contain ";" or "#".
        # "DEFAULT" is an ordinary profile, so no section is shared by all others.
        return RawConfigParser(inline_comment_prefixes=None, default_section=NO_DEFAULT_SECTION)

    def _read(self) -> RawConfigParser:
        config = self._parser()

        try:
            with open(self._path, encoding="utf-8") as f:
                config.read_file(f)
        except FileNotFoundError as e:
            self._logger.debug('Credentials file does not exist at "%s"', self._path)
            raise CredentialsError.not_found(str(self._path)) from e

        return config

    def save(self, profile: str, session: Session) -> None:
        """Store a session under a profile section."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

        try:
            config = self._read()
        except CredentialsError:
            config = self._parser()

        if config.has_section(profile):
            config.remove_section(profile)
        config.add_section(profile)

        for key, value in session.to_ini().items():
            config.set(profile, key, value)

        fd, temp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".credentials.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                config.write(f)
                f.flush()
                os.fsync(f.fileno())

            if os.name == "posix":
                os.chmod(temp_path, 0o600)

            os.replace(temp_path, self._path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        self._logger.info(
            'The credentials have been stored in "%s" under AWS profile "%s"',
            self._path,
            profile,
        )

    def load(self, profile: str, expected_role_arn: Optional[str] = None) -> Session:
        """Load the session stored under a profile section."""
        self._logger.debug('Loading credentials from "%s" for profile "%s"', self._path, profile)

        config = self._read()

        if not config.has_section(profile):
            raise CredentialsError.profile_not_found(profile, str(self._path))

        try:
            session = Session.from_ini(dict(config[profile]), profile=profile)
        except KeyError as e:
            raise CredentialsError.invalid_profile(profile, f"missing key {e}", str(self._path)) from e
        except ValueError as e:
            raise CredentialsError.invalid_profile(profile, str(e), str(self._path)) from e

        if expected_role_arn and session.role.role_arn != expected_role_arn:
            self._logger.warning(
                'Found profile "%s" credentials for a different role ARN (found "%s" != received "%s")',
                profile,
                session.role.role_arn,
                expected_role_arn,
            )
            raise CredentialsError.role_mismatch(profile, session.role.role_arn, expected_role_arn)

        return session
