"""
RuntimeKit CLI argument parser.

This module implements the command-line interface for RuntimeKit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

try:
    from importlib.metadata import version

    __version__ = version("runtimekit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """RuntimeKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="runtimekit",
            description="RuntimeKit - language runtime provisioning for image builds",
            epilog='Use "runtimekit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"RuntimeKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./runtimekit.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )
        parser.add_argument(
            "--layers-dir",
            type=Path,
            metavar="PATH",
            help="Directory holding layers (default: $RUNTIMEKIT_LAYERS_DIR "
            "or <project-root>/.runtimekit/layers)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_detect_command(subparsers)
        self._add_build_command(subparsers)

        return parser

    def _add_detect_command(self, subparsers):
        """Add 'detect' subcommand."""
        subparsers.add_parser(
            "detect",
            help="Decide whether the project needs the runtime",
            description="Exit 0 to opt in, 100 to opt out",
        )

    def _add_build_command(self, subparsers):
        """Add 'build' subcommand."""
        subparsers.add_parser(
            "build",
            help="Resolve and install the runtime into its layer",
            description="Resolve the runtime version and install it unless cached",
        )

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Parse arguments and run the selected command.

        Args:
            argv: Command-line arguments (default: sys.argv[1:])

        Returns:
            Exit code
        """
        args = self.parser.parse_args(argv)
        self._configure_logging(args)

        if not args.command:
            self.parser.print_help()
            return 0

        return self._dispatch_command(args)

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "detect": "runtimekit.cli.commands.detect",
            "build": "runtimekit.cli.commands.build",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
