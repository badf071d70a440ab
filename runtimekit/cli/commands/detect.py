"""
Detect command implementation.

Reports whether the project needs the configured runtime.
"""

import logging

from runtimekit.cli.utils import build_config_from_args, print_error
from runtimekit.core.exceptions import RuntimeKitError
from runtimekit.runtime.pipeline import RuntimeBuildpack

logger = logging.getLogger(__name__)

EXIT_OPT_IN = 0
EXIT_OPT_OUT = 100
EXIT_ERROR = 1


def run(args) -> int:
    """
    Run the detect command.

    Args:
        args: Parsed command-line arguments

    Returns:
        0 to opt in, 100 to opt out, 1 on configuration errors
    """
    try:
        config = build_config_from_args(args)
        buildpack = RuntimeBuildpack(config)
        try:
            result = buildpack.detect()
        finally:
            buildpack.http.close()
    except RuntimeKitError as e:
        print_error(str(e))
        return EXIT_ERROR

    logger.info(str(result))
    return EXIT_OPT_IN if result.opt_in else EXIT_OPT_OUT
