"""
Shared utilities for CLI commands.
"""

import logging
import sys
from typing import Optional

from runtimekit.config.parser import BuildConfig, load_config

logger = logging.getLogger(__name__)


def build_config_from_args(args) -> BuildConfig:
    """
    Load the effective configuration from parsed global options.

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    project_root = args.project_root.resolve()
    layers_dir = args.layers_dir.resolve() if args.layers_dir else None
    logger.debug(f"Project root: {project_root}")
    return load_config(project_root, config_file=args.config, layers_dir=layers_dir)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
