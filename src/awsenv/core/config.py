"""
Project configuration for awsenv.

Settings come from three places, highest priority first:
- command line options
- environment variables (AWSENV_NAMESPACE, AWS_REGION, AWS_PROFILE)
- the .awsenv file, one [section] per AWS CLI profile name

The .awsenv file is looked up in the working directory and its two parents.
"""

import configparser
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Mapping, Optional

from .errors import ValidationError
from .paths import normalize_namespace
from .store import DEFAULT_REGION


CONFIG_FILENAME = ".awsenv"
DEFAULT_SECTION = "default"
SEARCH_DEPTH = 2

ENV_NAMESPACE = "AWSENV_NAMESPACE"
ENV_REGION = "AWS_REGION"
ENV_PROFILE = "AWS_PROFILE"

TRUE_VALUES = {"1", "true", "yes", "on"}

logger = logging.getLogger("awsenv.config")


@dataclass
class Settings:
    """Resolved settings for one command."""
    namespace: Optional[str] = None
    region: str = DEFAULT_REGION
    profile: Optional[str] = None
    encrypt: bool = False
    paranoid: bool = False
    without_exporter: bool = False
    config_path: Optional[Path] = None


def parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value.strip().lower() in TRUE_VALUES


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the nearest .awsenv file.

    Args:
        start: Directory to start from (defaults to the working directory)

    Returns:
        Path to the file, or None if not found
    """
    directory = Path(start or Path.cwd()).resolve()
    for candidate in [directory, *directory.parents][:SEARCH_DEPTH + 1]:
        path = candidate / CONFIG_FILENAME
        if path.is_file():
            logger.debug("Found %s", path)
            return path
    return None


def load_profile_section(path: Optional[Path], profile: Optional[str]) -> Dict[str, str]:
    """
    Read the section for a profile from a .awsenv file.

    Args:
        path: Path to the .awsenv file, or None
        profile: Profile name (the [default] section when None)

    Returns:
        Key-value pairs of the section, empty if the file or section is missing

    Raises:
        ValidationError: If the file is not valid INI
    """
    if path is None:
        return {}

    parser = configparser.ConfigParser(default_section="__awsenv_none__", interpolation=None)
    try:
        parser.read(path, encoding="utf-8")
    except configparser.Error as e:
        raise ValidationError(f"Could not parse {path}: {e}") from e

    section = profile or DEFAULT_SECTION
    if not parser.has_section(section):
        logger.debug("Profile [%s] not found in %s", section, path)
        return {}

    return dict(parser.items(section))


def resolve_settings(
    namespace: Optional[str] = None,
    region: Optional[str] = None,
    profile: Optional[str] = None,
    encrypt: Optional[bool] = None,
    paranoid: Optional[bool] = None,
    without_exporter: Optional[bool] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
    search_from: Optional[Path] = None,
) -> Settings:
    """
    Merge command line values, environment and the .awsenv file.

    Command line arguments are None when the option was not given.

    Args:
        namespace, region, profile, encrypt, paranoid, without_exporter:
            Values from the command line
        environ: Environment mapping (defaults to os.environ)
        config_path: Explicit .awsenv path; searched for when None
        search_from: Directory to search from when config_path is None

    Returns:
        Resolved Settings
    """
    environ = os.environ if environ is None else environ

    profile = profile or environ.get(ENV_PROFILE)
    path = config_path or find_config_file(search_from)
    file_values = load_profile_section(path, profile)

    def pick(cli_value, env_name, file_key):
        if cli_value is not None:
            return cli_value
        if env_name and environ.get(env_name):
            return environ[env_name]
        return file_values.get(file_key)

    def pick_flag(cli_value, file_key) -> bool:
        # Flags can only be switched on from the command line
        if cli_value:
            return True
        return bool(parse_bool(file_values.get(file_key)))

    resolved_namespace = pick(namespace, ENV_NAMESPACE, "namespace")
    if resolved_namespace:
        resolved_namespace = normalize_namespace(resolved_namespace)

    return Settings(
        namespace=resolved_namespace or None,
        region=pick(region, ENV_REGION, "region") or DEFAULT_REGION,
        profile=profile,
        encrypt=pick_flag(encrypt, "encrypt"),
        paranoid=pick_flag(paranoid, "paranoid"),
        without_exporter=pick_flag(without_exporter, "without_exporter"),
        config_path=path,
    )


def _slug(value: str) -> str:
    slug = re.sub(r'[^a-z0-9\-_.]', '-', value.lower())
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


def generate_namespace(app_name: str, environment: str = "production") -> str:
    """
    Suggest a namespace for an application environment.

    Parameter paths may not start with /aws or /ssm, hence the /envstore root.

    Returns:
        Namespace like /envstore/app_myapp/env_production
    """
    return f"/envstore/app_{_slug(app_name)}/env_{_slug(environment)}"


def render_example_config(app_name: str) -> str:
    """Build the contents of a starter .awsenv file."""
    environments = [
        (DEFAULT_SECTION, "production", True),
        ("production", "production", True),
        ("staging", "staging", False),
        ("development", "development", False),
    ]

    sections = []
    for section, environment, locked in environments:
        flag = "true" if locked else "false"
        sections.append(
            f"[{section}]\n"
            f"namespace = {generate_namespace(app_name, environment)}\n"
            f"encrypt = {flag}\n"
            f"paranoid = {flag}\n"
        )

    header = (
        "# AWSENV Project Configuration\n"
        f"# Auto-generated for: {app_name}\n"
        f"# Created at: {datetime.now().isoformat(timespec='seconds')}\n"
        "#\n"
        "# Section names must match AWS CLI profile names.\n"
        "# Keys: namespace, region, encrypt, paranoid, without_exporter\n"
    )
    return header + "\n" + "\n".join(sections)


def write_example_config(directory: Optional[Path] = None) -> Path:
    """
    Write a starter .awsenv into directory.

    Returns:
        Path of the written file

    Raises:
        ValidationError: If the file already exists
    """
    directory = Path(directory or Path.cwd())
    path = directory / CONFIG_FILENAME
    if path.exists():
        raise ValidationError(f"Configuration already exists at: {path}")

    app_name = directory.resolve().name or "my-app"
    path.write_text(render_example_config(app_name), encoding="utf-8")
    return path
