"""Argument parsing functionality for the dependency updater."""

import argparse
from constants import Constants


def _add_common_options(parser):
    """Logging and config options shared by every action."""
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel", "--log-level",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS,
                        default="INFO")
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output log lines to console.",
                        action="store_true")


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="depupdate",
        description=(
            "Pin a project's package dependencies to the newest versions "
            "required by a root package"
        ),
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="action", metavar="ACTION")
    subparsers.required = True

    update = subparsers.add_parser(
        "update",
        help="Update sfdx-project.json dependencies from a package's dependency graph",
    )
    update.add_argument("-p", "--package-id",
                        dest="PACKAGE_ID",
                        help="Root package version id (04t...) or its version alias in packageAliases (Pkg@1.0.0-1)",
                        action="store", type=str,
                        required=True)
    update.add_argument("-u", "--target-org", "--username",
                        dest="TARGET_ORG",
                        help="Username of the Dev Hub to query (default: configured target_dev_hub)",
                        action="store", type=str)
    update.add_argument("--project-file",
                        dest="PROJECT_FILE",
                        help=f"Path to the project file (default: {Constants.PROJECT_FILE})",
                        action="store", type=str,
                        default=Constants.PROJECT_FILE)
    update.add_argument("--instance-url",
                        dest="INSTANCE_URL",
                        help="Dev Hub instance URL, overrides config and environment",
                        action="store", type=str)
    update.add_argument("--api-version",
                        dest="API_VERSION",
                        help=f"API version to use (default: {Constants.API_VERSION})",
                        action="store", type=str)
    update.add_argument("--timeout",
                        dest="TIMEOUT",
                        help=f"Per-request timeout in seconds (default: {Constants.REQUEST_TIMEOUT})",
                        action="store", type=int)
    update.add_argument("--max-concurrency",
                        dest="MAX_CONCURRENCY",
                        help=f"Dependency fetches in flight at once (default: {Constants.MAX_CONCURRENCY})",
                        action="store", type=int)
    update.add_argument("--dry-run",
                        dest="DRY_RUN",
                        help="Report updates without writing the project file.",
                        action="store_true")
    update.add_argument("--json",
                        dest="JSON",
                        help="Print the updated packages as JSON on stdout.",
                        action="store_true")
    update.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if warnings are present.",
                        action="store_true")
    _add_common_options(update)

    return parser.parse_args(argv)
