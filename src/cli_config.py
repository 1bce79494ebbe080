"""Runtime configuration: YAML config file, environment and CLI overrides.

Precedence is CLI > environment (DEPUPDATE_*) > config file > Constants.
Org credentials are looked up per username; establishing the session itself
(OAuth flows, token refresh) happens outside this tool, which only needs an
instance URL and an access token.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from constants import Constants
from errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class OrgConnection:
    """Credentials for the Dev Hub that answers package queries."""
    username: Optional[str]
    instance_url: str
    access_token: str
    api_version: str = Constants.API_VERSION

    def __repr__(self) -> str:
        return (
            f"OrgConnection(username={self.username!r}, instance_url={self.instance_url!r}, "
            f"api_version={self.api_version!r})"
        )


@dataclass
class UpdaterConfig:
    """Configuration for one update run."""

    package_id: str = ""
    project_file: str = Constants.PROJECT_FILE
    target_org: Optional[str] = None
    instance_url: Optional[str] = None
    api_version: str = Constants.API_VERSION
    timeout: int = Constants.REQUEST_TIMEOUT
    max_concurrency: int = Constants.MAX_CONCURRENCY
    dry_run: bool = False
    json_output: bool = False
    error_on_warnings: bool = False
    orgs: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_args(cls, args: Any, file_config: Optional[Dict[str, Any]] = None) -> "UpdaterConfig":
        """Create config from CLI arguments layered over env and file settings.

        Args:
            args: Parsed CLI arguments namespace.
            file_config: Parsed config file contents.

        Returns:
            UpdaterConfig instance.
        """
        file_config = file_config or {}
        env = os.environ

        config = cls(
            package_id=getattr(args, "PACKAGE_ID", "") or "",
            project_file=getattr(args, "PROJECT_FILE", None) or Constants.PROJECT_FILE,
            dry_run=bool(getattr(args, "DRY_RUN", False)),
            json_output=bool(getattr(args, "JSON", False)),
            error_on_warnings=bool(getattr(args, "ERROR_ON_WARNINGS", False)),
        )

        config.target_org = (
            getattr(args, "TARGET_ORG", None)
            or env.get(Constants.ENV_TARGET_DEV_HUB)
            or file_config.get("target_dev_hub")
        )
        config.instance_url = getattr(args, "INSTANCE_URL", None)
        config.api_version = str(
            getattr(args, "API_VERSION", None)
            or env.get(Constants.ENV_API_VERSION)
            or file_config.get("api_version")
            or Constants.API_VERSION
        )
        config.timeout = _as_int(
            getattr(args, "TIMEOUT", None), file_config.get("timeout"), Constants.REQUEST_TIMEOUT
        )
        config.max_concurrency = _as_int(
            getattr(args, "MAX_CONCURRENCY", None),
            file_config.get("max_concurrency"),
            Constants.MAX_CONCURRENCY,
        )
        orgs = file_config.get("orgs") or {}
        if not isinstance(orgs, dict):
            raise ConfigurationError("'orgs' in the config file must be a mapping")
        config.orgs = orgs
        return config


def _as_int(*candidates: Any) -> int:
    for value in candidates:
        if value is None:
            continue
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Expected an integer, got {value!r}") from exc
        if number < 1:
            raise ConfigurationError(f"Expected a positive integer, got {number}")
        return number
    raise ConfigurationError("No integer value available")


def load_config_file(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML config file.

    An explicit path (argument or DEPUPDATE_CONFIG) that does not exist is
    reported and ignored; the default `.depupdate.yml` is optional.

    Raises:
        ConfigurationError: If the file exists but is not a YAML mapping.
    """
    explicit = path or os.environ.get(Constants.ENV_CONFIG)
    config_path = explicit or Constants.CONFIG_FILE
    if not os.path.isfile(config_path):
        if explicit:
            logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to load config {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    logger.debug("Loaded config from: %s", config_path)
    return data


def run_token_command(command: str, username: Optional[str] = None) -> Optional[str]:
    """Run a shell command that prints an access token; None on any failure.

    `{username}` in the command is replaced by the target username.
    """
    if username:
        command = command.replace("{username}", username)
    try:
        result = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            timeout=Constants.TOKEN_COMMAND_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Failed to execute access token command: %s", exc)
        return None
    if result.returncode != 0:
        logger.warning("Access token command exited with status %s", result.returncode)
        return None
    token = (result.stdout or "").strip()
    return token or None


def get_access_token(username: Optional[str], org_config: Dict[str, Any]) -> Optional[str]:
    """Get the access token from various sources in priority order.

    Priority:
    1. Environment variable DEPUPDATE_ACCESS_TOKEN
    2. Command execution: DEPUPDATE_ACCESS_TOKEN_COMMAND env var or the org's
       access_token_command
    3. The org's access_token in the config file

    Returns:
        Access token string or None if not available
    """
    env_token = os.environ.get(Constants.ENV_ACCESS_TOKEN)
    if env_token and env_token.strip():
        return env_token.strip()

    token_command = os.environ.get(Constants.ENV_ACCESS_TOKEN_COMMAND) or org_config.get(
        "access_token_command"
    )
    if token_command:
        token = run_token_command(str(token_command), username)
        if token:
            return token

    token = org_config.get("access_token")
    if isinstance(token, str) and token.strip():
        return token.strip()
    return None


def resolve_connection(config: UpdaterConfig) -> OrgConnection:
    """Assemble the Dev Hub connection for this run.

    Raises:
        ConfigurationError: If the instance URL or access token is missing.
    """
    username = config.target_org
    org_config: Dict[str, Any] = {}
    if username:
        org_config = config.orgs.get(username) or {}
        if not org_config:
            logger.debug("No config entry for org %s", username)

    instance_url = (
        config.instance_url
        or os.environ.get(Constants.ENV_INSTANCE_URL)
        or org_config.get("instance_url")
    )
    if not instance_url:
        raise ConfigurationError(
            "No Dev Hub instance URL. Pass --instance-url, set "
            f"{Constants.ENV_INSTANCE_URL}, or configure orgs.<username>.instance_url."
        )

    access_token = get_access_token(username, org_config)
    if not access_token:
        raise ConfigurationError(
            f"No access token for {username or instance_url}. Set {Constants.ENV_ACCESS_TOKEN}, "
            f"{Constants.ENV_ACCESS_TOKEN_COMMAND}, or configure an access_token_command."
        )

    return OrgConnection(
        username=username,
        instance_url=str(instance_url),
        access_token=access_token,
        api_version=config.api_version,
    )
