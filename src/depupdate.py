"""dependency-updater - pin a project's package dependencies to the newest
versions required by a root package.

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys

from args import parse_args
from cli_config import UpdaterConfig, load_config_file, resolve_connection
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from errors import ConfigurationError, ManifestParseError, ResolutionError, ServiceRequestError
from registry.devhub import DevHubClient
from updater import run_update_sync

logger = logging.getLogger(__name__)


def _setup_logging(args):
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    root = logging.getLogger()
    if getattr(args, "QUIET", False):
        for handler in root.handlers:
            if handler.get_name() == "depupdate-console":
                handler.setLevel(logging.CRITICAL + 1)

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        root.addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def run_update(config):
    """Run the update action and return an exit code.

    Args:
        config (UpdaterConfig): Run configuration.

    Returns:
        int: Exit code
    """
    try:
        connection = resolve_connection(config)
    except ConfigurationError as e:
        logging.error("%s", e)
        return ExitCodes.CONFIG_ERROR.value

    logging.info("Connecting to %s...", connection.username or connection.instance_url)
    client = DevHubClient(
        connection.instance_url,
        connection.access_token,
        api_version=connection.api_version,
        timeout=config.timeout,
        max_connections=config.max_concurrency,
    )

    try:
        report = run_update_sync(
            client,
            config.project_file,
            config.package_id,
            dry_run=config.dry_run,
            max_concurrency=config.max_concurrency,
        )
    except ManifestParseError as e:
        logging.error("Project file error: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value
    except ServiceRequestError as e:
        logging.error("Dev Hub request failed: %s, aborting", e)
        return ExitCodes.CONNECTION_ERROR.value
    except ResolutionError as e:
        logging.error("Dependency resolution failed: %s, aborting", e)
        return ExitCodes.RESOLUTION_ERROR.value
    except OSError as e:
        logging.error("Project file couldn't be written to disk: %s", e)
        return ExitCodes.FILE_ERROR.value

    if config.json_output:
        print(json.dumps({"status": 0, "result": report.to_json()}, indent=2))

    for alias, package_id in report.added_aliases.items():
        logging.info("Added alias %s -> %s", alias, package_id)
    logging.info("%d package(s) updated", len(report.updates))

    if report.warnings:
        logging.warning("%d package(s) have no alias; their ids are used instead.", len(report.warnings))
        if config.error_on_warnings:
            logging.error("Warnings present, exiting with non-zero status code.")
            return ExitCodes.EXIT_WARNINGS.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action)
        )

    try:
        file_config = load_config_file(getattr(args, "CONFIG", None))
        config = UpdaterConfig.from_args(args, file_config)
    except ConfigurationError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    code = run_update(config)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action=args.action, outcome=code)
        )
    sys.exit(code)


if __name__ == "__main__":
    main()
