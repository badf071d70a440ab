"""
Build command implementation.

Resolves the runtime version and installs it into its layer unless the
layer already holds it.
"""

import logging

from runtimekit.cli.utils import build_config_from_args, print_error
from runtimekit.core.exceptions import RuntimeKitError, UserError
from runtimekit.runtime.pipeline import RuntimeBuildpack

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_INTERNAL_ERROR = 2


def run(args) -> int:
    """
    Run the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        0 on success, 1 for user errors, 2 for internal errors
    """
    try:
        config = build_config_from_args(args)
        buildpack = RuntimeBuildpack(config)
        try:
            result = buildpack.build()
        finally:
            buildpack.http.close()
    except UserError as e:
        print_error(str(e))
        return EXIT_USER_ERROR
    except RuntimeKitError as e:
        print_error(f"{type(e).__name__}: {e}")
        return EXIT_INTERNAL_ERROR

    status = "cached" if result.cache_hit else "installed"
    logger.info(f"{result.runtime} {result.version} {status} at {result.layer_path}")
    return EXIT_SUCCESS
