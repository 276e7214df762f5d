"""modinstall - forge module installer with dependency resolution.

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys

import yaml

from args import parse_args
from constants import Constants, ExitCodes, load_yaml_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from errors import InstallerError, InvalidConstraint, InvalidName, TransportError, UnpackError
from installer.orchestrator import InstallOptions, InstallResult, install
from versioning.models import ResolutionNode

logger = logging.getLogger(__name__)


def render_tree(node: ResolutionNode, prefix: str = "", last: bool = True) -> list:
    """Render a resolution tree as indented lines, root first."""
    branch = "└─" if last else "├─"
    joint = "┬" if node.children else "─"
    lines = [f"{prefix}{branch}{joint} {node.module} (v{node.version})"]
    child_prefix = prefix + ("  " if last else "│ ")
    for i, child in enumerate(node.children):
        lines.extend(render_tree(child, child_prefix, i == len(node.children) - 1))
    return lines


def report(result: InstallResult, options: InstallOptions, as_json: bool) -> None:
    """Print the outcome of an install run to stdout/stderr."""
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    if result.ok:
        print(options.dir)
        print("\n".join(render_tree(result.tree)))
    else:
        sys.stderr.write(result.error["multiline"] + "\n")


def run_install(args) -> int:
    """Execute the install subcommand and return an exit code."""
    if args.FORGE_URL:
        Constants.FORGE_URL = args.FORGE_URL
    options = InstallOptions(
        dir=os.path.abspath(os.path.expanduser(args.DIR or Constants.MODULE_DIR)),
        version=args.VERSION,
        force=args.FORCE,
        ignore_dependencies=args.IGNORE_DEPENDENCIES,
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Install options",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="install",
                target=args.MODULE,
                force=options.force,
                ignore_dependencies=options.ignore_dependencies
            )
        )

    try:
        result = install(args.MODULE, options)
    except (InvalidName, InvalidConstraint) as e:
        logger.error("%s", e)
        return ExitCodes.USAGE_ERROR.value
    except TransportError as e:
        logger.error("Connection error: %s", e)
        return ExitCodes.CONNECTION_ERROR.value
    except (UnpackError, InstallerError, OSError) as e:
        logger.error("Install failed: %s", e)
        return ExitCodes.FILE_ERROR.value

    report(result, options, args.JSON)
    if not result.ok:
        return ExitCodes.RESOLUTION_FAILED.value
    return ExitCodes.SUCCESS.value


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    # Honor CLI --loglevel by passing it to centralized logger via env
    os.environ[Constants.ENV_LOG_LEVEL] = args.LOG_LEVEL
    configure_logging(args.LOG_FILE)

    try:
        load_yaml_config(args.CONFIG)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        logger.error("Could not load configuration: %s", e)
        return ExitCodes.FILE_ERROR.value

    if args.COMMAND == "install":
        return run_install(args)
    return ExitCodes.USAGE_ERROR.value


if __name__ == "__main__":
    sys.exit(main())
