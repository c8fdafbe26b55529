"""
Configuration - Settings resolved once at startup.

Precedence, highest first:

1. Command line arguments.
2. ``GSTS_*`` environment variables (``GSTS_AWS_ROLE_ARN``, ``GSTS_CACHE_DIR``...).
3. AWS CLI environment variables (``AWS_REGION``, ``AWS_DEFAULT_REGION``, ``AWS_PROFILE``).
4. The AWS CLI configuration file (``$AWS_CONFIG_FILE`` or ``~/.aws/config``),
   in the section of the selected profile. gsts-specific keys live in a
   ``gsts`` sub-section:

       [profile work]
       region = eu-west-1
       duration_seconds = 43200
       gsts =
         role_arn = arn:aws:iam::123456789012:role/Admin
         idp_id = C01abcdef

5. Built-in defaults.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional
import os
import sys

from botocore.configloader import load_config as load_aws_config
from botocore.exceptions import ConfigNotFound

ENV_PREFIX = "GSTS_"
OUTPUT_FORMATS = ("json", "none")
TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off", "")


class ConfigError(ValueError):
    """Raised when a setting has an invalid value."""


def default_cache_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    """Per-user cache directory for gsts, following platform conventions."""
    environ = os.environ if environ is None else environ
    home = Path.home()

    if sys.platform == "darwin":
        return str(home / "Library" / "Caches" / "gsts")

    if sys.platform == "win32":
        base = environ.get("LOCALAPPDATA") or str(home / "AppData" / "Local")
        return str(Path(base) / "gsts" / "Cache")

    base = environ.get("XDG_CACHE_HOME") or str(home / ".cache")
    return str(Path(base) / "gsts")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value

    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    if isinstance(value, int):
        return value
    return int(str(value).strip())


def _to_str(value: Any) -> str:
    return str(value).strip()


@dataclass(frozen=True)
class Parameter:
    """How one setting is read and coerced."""
    coerce: Callable[[Any], Any] = _to_str
    aws_config_key: Optional[str] = None
    aws_env: tuple = ()


PARAMETERS: Dict[str, Parameter] = {
    "aws_profile": Parameter(aws_env=("AWS_PROFILE",)),
    "aws_role_arn": Parameter(aws_config_key="gsts.role_arn"),
    "aws_session_duration": Parameter(coerce=_to_int, aws_config_key="duration_seconds"),
    "aws_region": Parameter(aws_config_key="region", aws_env=("AWS_REGION", "AWS_DEFAULT_REGION")),
    "cache_dir": Parameter(aws_config_key="gsts.cache_dir"),
    "credentials_cache": Parameter(coerce=_to_bool),
    "force": Parameter(coerce=_to_bool, aws_config_key="gsts.force"),
    "idp_id": Parameter(aws_config_key="gsts.idp_id"),
    "sp_id": Parameter(aws_config_key="gsts.sp_id"),
    "username": Parameter(aws_config_key="gsts.username"),
    "output": Parameter(),
    "saml_response_file": Parameter(),
    "verbose": Parameter(coerce=_to_int, aws_config_key="gsts.verbose"),
}


@dataclass(frozen=True)
class Config:
    """Resolved gsts settings, passed by value to the components that need them."""
    aws_profile: str = "default"
    aws_role_arn: Optional[str] = None
    aws_session_duration: Optional[int] = None
    aws_region: Optional[str] = None
    cache_dir: str = ""
    credentials_cache: bool = True
    force: bool = False
    idp_id: Optional[str] = None
    sp_id: Optional[str] = None
    username: Optional[str] = None
    output: Optional[str] = None
    saml_response_file: Optional[str] = None
    verbose: int = 0
    command: Optional[str] = None

    @property
    def credentials_file(self) -> Path:
        return Path(self.cache_dir).expanduser() / "credentials"

    @property
    def saml_url(self) -> Optional[str]:
        """Identity provider URL that starts the SAML sign-in."""
        if not self.idp_id or not self.sp_id:
            return None
        return (
            "https://accounts.google.com/o/saml2/initsso"
            f"?idpid={self.idp_id}&spid={self.sp_id}&forceauthn=false"
        )


def read_aws_profile(profile: str, environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Read a profile section of the AWS CLI configuration file.

    Returns:
        The profile's settings (sub-sections as nested dicts), or an empty
        dict if the file or the profile does not exist
    """
    path = environ.get("AWS_CONFIG_FILE") or str(Path.home() / ".aws" / "config")

    try:
        aws_config = load_aws_config(path)
    except ConfigNotFound:
        return {}

    return aws_config.get("profiles", {}).get(profile, {})


def _lookup(section: Mapping[str, Any], key: str) -> Any:
    # Accept both a nested sub-section ("gsts =\n  role_arn = ...") and a
    # flat dotted key ("gsts.role_arn = ...").
    if key in section:
        return section[key]

    head, _, tail = key.partition(".")
    nested = section.get(head)
    if tail and isinstance(nested, Mapping):
        return nested.get(tail)
    return None


def _coerce(name: str, value: Any) -> Any:
    try:
        return PARAMETERS[name].coerce(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name.replace('_', '-')}: {e}") from e


def load_config(
    cli_args: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    is_tty: bool = True,
) -> Config:
    """
    Resolve settings from every source.

    Args:
        cli_args: Parsed command line arguments (unset options are None)
        environ: Environment variables (defaults to os.environ)
        is_tty: Whether stdout is interactive; JSON output is the default otherwise

    Returns:
        Resolved configuration

    Raises:
        ConfigError: A setting has a value of the wrong type or is unsupported
    """
    cli_args = cli_args or {}
    environ = os.environ if environ is None else environ

    def from_cli_or_env(name: str) -> Any:
        value = cli_args.get(name)
        if value is not None:
            return value

        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            return value

        for variable in PARAMETERS[name].aws_env:
            if environ.get(variable):
                return environ[variable]

        return None

    profile = from_cli_or_env("aws_profile") or "default"
    aws_profile_config = read_aws_profile(profile, environ)

    values: Dict[str, Any] = {"aws_profile": _to_str(profile)}

    for name, parameter in PARAMETERS.items():
        if name == "aws_profile":
            continue

        value = from_cli_or_env(name)
        if value is None and parameter.aws_config_key:
            value = _lookup(aws_profile_config, parameter.aws_config_key)

        if value is not None and value != "":
            values[name] = _coerce(name, value)

    values.setdefault("cache_dir", default_cache_dir(environ))

    output = values.get("output")
    if output is None and not is_tty:
        values["output"] = "json"
    elif output is not None and output not in OUTPUT_FORMATS:
        raise ConfigError(f"Unsupported output format {output}")

    command = cli_args.get("command")
    if command:
        values["command"] = command

    return Config(**values)
