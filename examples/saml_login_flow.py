"""
Example: SAML response to cached AWS credentials with the SDK.

Shows the steps the gsts command performs:
1. Read the intercepted SAML form-post body
2. Pick the role to assume
3. Exchange the assertion with STS and cache the session
4. Print credentials for credential_process

Usage:
    python examples/saml_login_flow.py saml.txt arn:aws:iam::123456789012:role/Admin
"""

import sys
from gsts import CredentialsError, ErrorKind
from gsts.adapters import FileSAMLResponseSource, IniSessionStoreAdapter, StsTokenExchangeAdapter
from gsts.formatter import format_output
from gsts.sdk import CredentialsManager


def main(saml_file, role_arn=None):
    manager = CredentialsManager(
        token_exchange=StsTokenExchangeAdapter(region="us-east-1"),
        store=IniSessionStoreAdapter("~/.cache/gsts/credentials"),
    )

    # 1. Cached session first
    try:
        session = manager.load_session("example", role_arn)
        if session.is_valid():
            print(f"Cached session valid for {session.expires_in()}", file=sys.stderr)
            print(format_output(session, "json"))
            return
    except CredentialsError as e:
        if not e.is_recoverable:
            raise

    # 2. Parse the SAML response and select the role
    source = FileSAMLResponseSource(saml_file)
    try:
        prepared = manager.prepare_role_with_saml(source.capture(), role_arn)
    except CredentialsError as e:
        if e.kind is not ErrorKind.ROLE_NOT_FOUND:
            raise
        print(f"{e}. Available roles:", file=sys.stderr)
        for role in e.roles:
            print(f"  {role}", file=sys.stderr)
        sys.exit(1)

    if prepared.role_to_assume is None:
        print("Choose a role:", file=sys.stderr)
        for role in prepared.available_roles:
            print(f"  {role}", file=sys.stderr)
        sys.exit(1)

    # 3. Exchange and cache
    session = manager.assume_role_with_saml(
        prepared.saml_assertion,
        prepared.role_to_assume,
        profile="example",
    )

    # 4. credential_process output
    print(format_output(session, "json"))


if __name__ == "__main__":
    main(*sys.argv[1:3])
