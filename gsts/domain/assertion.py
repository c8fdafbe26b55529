"""
Assertion Parser - Extracts AWS roles from a SAML response.

Only the two AWS-specific attributes are consumed:
- https://aws.amazon.com/SAML/Attributes/Role (multi-valued, "principal,role" pairs)
- https://aws.amazon.com/SAML/Attributes/SessionDuration (optional, seconds)
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union
from urllib.parse import parse_qs
import base64
import binascii
import logging
import xml.etree.ElementTree as ET

from gsts.domain.role import Role, ROLE_ARN_PATTERN, PRINCIPAL_ARN_PATTERN
from gsts.errors import CredentialsError

log = logging.getLogger(__name__)

SAML_RESPONSE_FIELD = "SAMLResponse"
ROLE_ATTRIBUTE = "https://aws.amazon.com/SAML/Attributes/Role"
SESSION_DURATION_ATTRIBUTE = "https://aws.amazon.com/SAML/Attributes/SessionDuration"

SAMLPayload = Union[str, bytes, Mapping[str, Any]]


@dataclass(frozen=True)
class ParsedAssertion:
    """Result of parsing a SAML response."""
    roles: List[Role]
    saml_assertion: str = field(repr=False)
    session_duration: Optional[int] = None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


class AssertionParser:
    """
    Decodes a form-post SAML response into roles and the raw assertion.

    Malformed role values are skipped; an undecodable payload raises
    CredentialsError(MALFORMED_ASSERTION).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or log

    def parse(self, payload: SAMLPayload) -> ParsedAssertion:
        """
        Parse a SAML response payload.

        Args:
            payload: Form-post body (``SAMLResponse=...&RelayState=...``) or a
                mapping already carrying the ``SAMLResponse`` field

        Returns:
            Parsed roles (in assertion order), the base64 assertion string and
            the IdP-declared session duration

        Raises:
            CredentialsError: MALFORMED_ASSERTION if the payload cannot be decoded
        """
        saml_assertion = self._extract_assertion(payload)
        root = self._decode(saml_assertion)

        role_values: List[str] = []
        session_duration = None

        for element in root.iter():
            if _local_name(element.tag) != "Attribute":
                continue

            name = element.get("Name")
            values = [
                (value.text or "").strip()
                for value in element.iter()
                if _local_name(value.tag) == "AttributeValue"
            ]

            if name == ROLE_ATTRIBUTE:
                role_values.extend(values)
            elif name == SESSION_DURATION_ATTRIBUTE and values:
                session_duration = self._parse_session_duration(values[0])

        roles = self._parse_roles(role_values, session_duration)

        self._logger.debug(
            "Parsed %d role(s) from SAML assertion: %s",
            len(roles),
            ", ".join(role.name for role in roles) or "none",
        )

        return ParsedAssertion(
            roles=roles,
            saml_assertion=saml_assertion,
            session_duration=session_duration,
        )

    def _extract_assertion(self, payload: SAMLPayload) -> str:
        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise CredentialsError.malformed_assertion(str(e)) from e

        if isinstance(payload, str):
            fields = parse_qs(payload.strip(), keep_blank_values=True)
        elif isinstance(payload, Mapping):
            fields = payload
        else:
            raise CredentialsError.malformed_assertion(f"unsupported payload type {type(payload).__name__}")

        value = fields.get(SAML_RESPONSE_FIELD)
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None

        if not value:
            raise CredentialsError.malformed_assertion(f"missing {SAML_RESPONSE_FIELD} field")

        # An unencoded "+" in the body arrives as a space after form decoding.
        return value.strip().replace(" ", "+")

    def _decode(self, saml_assertion: str) -> ET.Element:
        try:
            document = base64.b64decode(saml_assertion)
            return ET.fromstring(document)
        except (binascii.Error, ValueError, ET.ParseError) as e:
            raise CredentialsError.malformed_assertion(str(e)) from e

    def _parse_session_duration(self, value: str) -> Optional[int]:
        try:
            session_duration = int(value)
        except ValueError:
            self._logger.warning("Ignoring non-numeric SessionDuration attribute %r", value)
            return None

        self._logger.debug("Found SessionDuration attribute %d", session_duration)
        return session_duration

    def _parse_roles(self, values: List[str], session_duration: Optional[int]) -> List[Role]:
        roles: List[Role] = []
        seen = set()

        for value in values:
            role_match = ROLE_ARN_PATTERN.search(value)
            principal_match = PRINCIPAL_ARN_PATTERN.search(value)

            if not role_match or not principal_match:
                self._logger.debug("Skipping malformed Role attribute value %r", value)
                continue

            role_arn = role_match.group(0)
            if role_arn in seen:
                continue

            try:
                role = Role.from_arn(
                    role_arn,
                    principal_arn=principal_match.group(0),
                    session_duration=session_duration,
                )
            except ValueError:
                self._logger.debug("Skipping malformed Role attribute value %r", value)
                continue

            seen.add(role_arn)
            self._logger.debug('Found role "%s" with principal ARN "%s"', role.role_arn, role.principal_arn)
            roles.append(role)

        return roles
