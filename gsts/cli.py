"""
Command Line - The ``gsts`` console script.

Obtains temporary AWS credentials from a Google SAML response, caches them
per profile and prints them in the ``credential_process`` format:

    [profile work]
    credential_process = gsts --aws-profile=work --saml-response-file=/tmp/saml.txt
"""

from typing import IO, Mapping, Optional, Sequence
import argparse
import logging
import sys
import webbrowser

from botocore.exceptions import BotoCoreError, ClientError

from gsts import __version__
from gsts.adapters.file_saml_source import FileSAMLResponseSource
from gsts.config import OUTPUT_FORMATS, Config, ConfigError, load_config
from gsts.domain.session import EXPIRATION_DELTA, Session, format_timestamp
from gsts.errors import CredentialsError, ErrorKind, remote_error_code
from gsts.formatter import format_output
from gsts.logger import configure_logging
from gsts.ports.saml_source_port import SAMLResponseSource
from gsts.sdk.credentials_manager import CredentialsManager

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

REMOTE_ERROR_MESSAGES = {
    "InvalidIdentityToken": "The SAML assertion was rejected by AWS, please sign in again",
    "ExpiredTokenException": "The SAML assertion has expired, please sign in again",
    "AccessDenied": "AWS denied access to the role, check that it trusts the SAML provider",
}


class CommandError(Exception):
    """User-facing failure of a command."""


def build_parser() -> argparse.ArgumentParser:
    # Every option defaults to None so lower-precedence sources can fill it in.
    parser = argparse.ArgumentParser(
        prog="gsts",
        description="Obtain and cache temporary AWS credentials through Google SAML sign-in",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--aws-profile", help="AWS profile name for storing credentials")
    parser.add_argument("--aws-role-arn", help="AWS role ARN to authenticate with")
    parser.add_argument("--aws-session-duration", help="AWS session duration in seconds")
    parser.add_argument("--aws-region", help="AWS region to send requests to")
    parser.add_argument("--cache-dir", help="Where to store cached data")
    parser.add_argument(
        "--force",
        action="store_true",
        default=None,
        help="Force re-authorization even with a valid session",
    )
    parser.add_argument(
        "--no-credentials-cache",
        dest="credentials_cache",
        action="store_false",
        default=None,
        help="Do not read or write the credentials cache",
    )
    parser.add_argument("--idp-id", help="Google Identity Provider ID (IDP ID)")
    parser.add_argument("--sp-id", help="Google Service Provider ID (SP ID)")
    parser.add_argument("--username", help="Google username to pre-fill during login")
    parser.add_argument(
        "--saml-response-file",
        help="File holding the captured SAML form-post body, or - for standard input",
    )
    parser.add_argument("--output", "-o", choices=OUTPUT_FORMATS, help="Output format")
    parser.add_argument("--verbose", "-v", action="count", default=None, help="Log verbose output")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("console", help="Open the SAML sign-in page in the default web browser")

    return parser


def open_console(config: Config) -> int:
    """Open the identity provider's SAML sign-in URL in a web browser."""
    url = config.saml_url
    if url is None:
        raise CommandError("--idp-id and --sp-id are required to open the console")

    log.debug("Opening url %s", url)
    webbrowser.open(url)

    return EXIT_OK


def load_cached_session(config: Config, manager: CredentialsManager) -> Optional[Session]:
    """
    Return the cached session of the configured profile if it is still valid.

    Raises:
        CredentialsError: A non-recoverable cache failure
    """
    if config.force or not manager.caching_enabled:
        return None

    try:
        session = manager.load_session(config.aws_profile, config.aws_role_arn)
    except CredentialsError as e:
        if not e.is_recoverable:
            raise
        log.debug("No usable cached session: %s", e)
        return None

    if not session.is_valid():
        log.debug("Session has expired on %s", format_timestamp(session.expires_at))
        return None

    return session


def saml_source_for(config: Config, stdin: Optional[IO[str]] = None) -> SAMLResponseSource:
    if not config.saml_response_file:
        raise CommandError("A SAML response is required, use --saml-response-file (or - for standard input)")

    return FileSAMLResponseSource(config.saml_response_file, stdin=stdin)


def _log_roles(roles) -> None:
    for role in roles:
        log.error("  %s (%s)", role.role_arn, role.name)


def authenticate(config: Config, manager: CredentialsManager, source: SAMLResponseSource) -> Session:
    """
    Return a valid session, from the cache or through a new token exchange.

    Raises:
        CommandError: No role could be selected
        CredentialsError: Malformed assertion or unknown role
        ClientError: The token exchange was rejected
    """
    session = load_cached_session(config, manager)
    if session is not None:
        log.info(
            "Skipping re-authorization as session is valid until %s. Use --force to ignore.",
            format_timestamp(session.expires_at - EXPIRATION_DELTA),
        )
        return session

    try:
        prepared = manager.prepare_role_with_saml(source.capture(), config.aws_role_arn)
    except CredentialsError as e:
        if e.kind is ErrorKind.ROLE_NOT_FOUND:
            log.error("Available roles:")
            _log_roles(e.roles)
        raise

    if prepared.role_to_assume is None:
        if not prepared.available_roles:
            raise CommandError("No roles are available in the SAML assertion")

        log.error("More than one role is available. Choose one with --aws-role-arn:")
        _log_roles(prepared.available_roles)
        raise CommandError("No role selected")

    session = manager.assume_role_with_saml(
        prepared.saml_assertion,
        prepared.role_to_assume,
        profile=config.aws_profile,
        custom_session_duration=config.aws_session_duration,
    )

    if manager.caching_enabled:
        log.info(
            'Login successful, credentials stored with AWS profile "%s" and role ARN "%s"',
            config.aws_profile,
            session.role.role_arn,
        )
    else:
        log.info('Login successful with role ARN "%s"', session.role.role_arn)

    return session


def _describe(error: Exception) -> str:
    if isinstance(error, ClientError):
        return REMOTE_ERROR_MESSAGES.get(remote_error_code(error), str(error))
    return str(error)


def main(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
    manager: Optional[CredentialsManager] = None,
) -> int:
    """
    Run the ``gsts`` command.

    Args:
        argv: Command line arguments (defaults to sys.argv)
        environ: Environment variables (defaults to os.environ)
        stdin: Stream for ``--saml-response-file=-``
        stdout: Stream the credentials are printed to
        manager: Preconfigured credentials manager (defaults to one built from config)

    Returns:
        Process exit code
    """
    stdout = stdout or sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(vars(args), environ=environ, is_tty=stdout.isatty())
    except ConfigError as e:
        parser.error(str(e))

    configure_logging(config.verbose)

    try:
        if config.command == "console":
            return open_console(config)

        manager = manager or CredentialsManager.from_config(config)
        session = authenticate(config, manager, saml_source_for(config, stdin))
    except (CommandError, CredentialsError, ClientError, BotoCoreError, OSError) as e:
        log.error(_describe(e))
        _print(stdout, format_output(None, config.output))
        return EXIT_FAILURE

    _print(stdout, format_output(session, config.output))

    return EXIT_OK


def _print(stdout: IO[str], text: str) -> None:
    if text:
        stdout.write(f"{text}\n")
        stdout.flush()


if __name__ == "__main__":
    sys.exit(main())
