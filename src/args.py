"""Argument parsing functionality for modinstall."""

import argparse

from constants import Constants


def build_parser():
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="modinstall",
        description="modinstall - resolve and install forge modules with their dependencies",
        add_help=True,
    )
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", required=True)

    install = subparsers.add_parser("install", help="Install a module and its dependencies")
    install.add_argument("MODULE",
                         help="Module to install, i.e: puppetlabs-stdlib",
                         type=str)
    install.add_argument("-v", "--version",
                         dest="VERSION",
                         help="Version requirement for the module, i.e: 1.0.0 or '>= 1.0.0'",
                         action="store",
                         type=str)
    install.add_argument("-i", "--dir", "--target-dir",
                         dest="DIR",
                         help=f"Directory modules are installed into (default: {Constants.MODULE_DIR})",
                         action="store",
                         type=str)
    install.add_argument("-f", "--force",
                         dest="FORCE",
                         help="Install the module without resolving dependencies, overwriting any installed copy",
                         action="store_true")
    install.add_argument("--ignore-dependencies",
                         dest="IGNORE_DEPENDENCIES",
                         help="Install the module only, without its dependencies",
                         action="store_true")
    install.add_argument("--forge",
                         dest="FORGE_URL",
                         help=f"Forge base URL (default: {Constants.FORGE_URL})",
                         action="store",
                         type=str)
    install.add_argument("--json",
                         dest="JSON",
                         help="Print the install result as JSON",
                         action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
