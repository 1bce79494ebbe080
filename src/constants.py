"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    EXIT_WARNINGS = 3
    RESOLUTION_ERROR = 4
    CONFIG_ERROR = 5


class LogFormats(Enum):
    """Log output formats understood by configure_logging.

    Args:
        Enum (string): Log output formats.
    """

    HUMAN = "human"
    JSON = "json"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PROJECT_FILE = "sfdx-project.json"
    CONFIG_FILE = ".depupdate.yml"
    LATEST_TOKEN = "LATEST"
    PACKAGE_ID_PREFIX = "0Ho"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    JSON_INDENT = 4

    # Dev Hub (Tooling API) access
    API_VERSION = "59.0"
    TOOLING_QUERY_PATH = "/services/data/v{api_version}/tooling/query/"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for each service request
    MAX_CONCURRENCY = 8  # Sibling dependency fetches in flight at once
    USER_AGENT = "dependency-updater/1.0"

    # Environment overrides
    ENV_CONFIG = "DEPUPDATE_CONFIG"
    ENV_TARGET_DEV_HUB = "DEPUPDATE_TARGET_DEV_HUB"
    ENV_INSTANCE_URL = "DEPUPDATE_INSTANCE_URL"
    ENV_ACCESS_TOKEN = "DEPUPDATE_ACCESS_TOKEN"
    ENV_ACCESS_TOKEN_COMMAND = "DEPUPDATE_ACCESS_TOKEN_COMMAND"
    ENV_API_VERSION = "DEPUPDATE_API_VERSION"
    ENV_LOG_LEVEL = "DEPUPDATE_LOG_LEVEL"
    ENV_LOG_FORMAT = "DEPUPDATE_LOG_FORMAT"
    TOKEN_COMMAND_TIMEOUT = 10
