# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for rpmbaseline.

This module provides the main CLI entry point for the rpmbaseline tool.

Commands:

    build: Select packages, link them into a tree and index it
    list: Show the packages a baseline would retain, without writing
    validate: Check a baseline definition without touching source trees

Example:
    Build a baseline:
        ```bash
        $ rpmbaseline build baselines/el7-2024q1.yaml
        ```

    Preview with a different cutoff and two versions per package:
        ```bash
        $ rpmbaseline list baselines/el7-2024q1.yaml --date 2024-03-31 --versions 2
        ```

    Use another main configuration:
        ```bash
        $ rpmbaseline build baselines/el7-2024q1.yaml --config ./config.yaml
        ```

    Enable debug output:
        ```bash
        $ rpmbaseline build baselines/el7-2024q1.yaml --debug
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, filesystem, external tool or validation failure)

Note:
    Each command has its own handler function (cmd_<command>). Errors are
    printed to stderr; verbose and debug modes add the full traceback.
    Debug mode implies verbose mode and dumps the loaded configuration.

"""

from __future__ import annotations

import argparse
from importlib.metadata import version
from pathlib import Path
import sys
import traceback

from rpmbaseline.config import DEFAULT_CONFIG_PATH
from rpmbaseline.core import build_baseline, select_baseline
from rpmbaseline.exceptions import BaselineError
from rpmbaseline.logging import get_logger, set_global_logger
from rpmbaseline.validation import validate_baseline


def _report_error(err: BaselineError, args: argparse.Namespace) -> int:
    print(f"Error: {err}", file=sys.stderr)
    if args.verbose or args.debug:
        traceback.print_exc()
    return 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'rpmbaseline validate' command.

    Validates a baseline definition without walking source directories or
    running external tools.

    Args:
        args: Parsed command-line arguments containing the definition path,
            the optional main configuration path and flags.

    Returns:
        Exit code (0 for a valid definition, 1 for invalid).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    definition_path = Path(args.definition).resolve()
    config_path = Path(args.config) if args.config else None

    print(f"Validating baseline definition: {definition_path}")
    print()

    result = validate_baseline(
        definition_path, config_path=config_path, verbose=args.verbose
    )

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Definition:  {result.definition_path}")
    print(f"Status:      {result.status.upper()}")
    print(f"Sources:     {result.source_count}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Baseline definition is valid!")
        return 0

    print()
    print(f"[FAILED] Validation failed with {len(result.errors)} error(s).")
    return 1


def cmd_list(args: argparse.Namespace) -> int:
    """Handler for 'rpmbaseline list' command.

    Runs selection and retention only and prints the retained packages in
    ranking order. Nothing is written.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    definition_path = Path(args.definition).resolve()

    try:
        result = select_baseline(
            definition_path,
            config_path=Path(args.config),
            date=args.date,
            versions=args.versions,
            include_32bit=args.include_32bit,
        )
    except BaselineError as err:
        return _report_error(err, args)

    print("=" * 70)
    print(f"RETAINED PACKAGES: {result.name}")
    print("=" * 70)
    for entry in result.retained:
        marker = "" if entry.exact else "  (loose parse)"
        print(f"{entry.arch:<8} {entry.filename}{marker}")
    print("=" * 70)
    print(f"Candidates:      {result.candidates}")
    print(f"Retained:        {len(result.retained)}")

    return 0


def cmd_build(args: argparse.Namespace) -> int:
    """Handler for 'rpmbaseline build' command.

    Builds the baseline tree: selects and ranks packages, links the retained
    ones under ``baseline_dir/<name>``, runs the indexer, writes descriptor
    files and signs metadata when a key is configured.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    Note:
        With --no-clean an existing tree is reused and already-present
        links are skipped.

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    definition_path = Path(args.definition).resolve()

    print(f"Building baseline from: {definition_path}")
    print()

    try:
        result = build_baseline(
            definition_path,
            config_path=Path(args.config),
            date=args.date,
            versions=args.versions,
            workers=args.workers,
            include_32bit=args.include_32bit,
            clean=not args.no_clean,
            index=not args.no_index,
        )
    except BaselineError as err:
        return _report_error(err, args)

    print("=" * 70)
    print("BUILD RESULTS")
    print("=" * 70)
    print(f"Baseline:        {result.name}")
    print(f"Tree:            {result.tree}")
    print(f"Candidates:      {result.candidates}")
    print(f"Retained:        {result.retained}")
    print(f"Linked:          {result.linked} ({result.skipped} already present)")
    print(f"Indexed:         {'yes' if result.indexed else 'no'}")
    print(f"Signed:          {', '.join(p.name for p in result.signed) or 'no'}")
    print(f"Repo File:       {result.repo_file}")
    print(f"Status:          {result.status}")
    print("=" * 70)
    print()
    print("[SUCCESS] Baseline built successfully!")

    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "definition",
        help="Path to the baseline definition YAML file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _add_selection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Main configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--date",
        default=None,
        help="Cutoff date YYYY-MM-DD applied to every source directory",
    )
    parser.add_argument(
        "--versions",
        type=int,
        default=None,
        help="Versions to keep per package and architecture",
    )
    parser.add_argument(
        "--include-32bit",
        action="store_true",
        help="Keep i386/i686 packages",
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the rpmbaseline CLI.

    This function is registered as the 'rpmbaseline' console script in
    pyproject.toml.
    """
    parser = argparse.ArgumentParser(
        prog="rpmbaseline",
        description="Build point-in-time RPM repository baselines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"rpmbaseline {version('rpmbaseline')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'build' command
    parser_build = subparsers.add_parser(
        "build",
        help="Build a baseline repository tree",
        description="Select packages, link them into baseline_dir/<name> and index the tree.",
    )
    _add_common_arguments(parser_build)
    _add_selection_arguments(parser_build)
    parser_build.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count passed to the indexer (default: from config)",
    )
    parser_build.add_argument(
        "--no-clean",
        action="store_true",
        help="Keep an existing tree instead of recreating it",
    )
    parser_build.add_argument(
        "--no-index",
        action="store_true",
        help="Skip createrepo, zypper descriptors and signing",
    )
    parser_build.set_defaults(func=cmd_build)

    # 'list' command
    parser_list = subparsers.add_parser(
        "list",
        help="Show the packages a baseline would retain",
        description="Run selection and retention only; nothing is written.",
    )
    _add_common_arguments(parser_list)
    _add_selection_arguments(parser_list)
    parser_list.set_defaults(func=cmd_list)

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate a baseline definition (no filesystem changes)",
        description="Check a baseline definition for syntax and configuration errors.",
    )
    _add_common_arguments(parser_validate)
    parser_validate.add_argument(
        "--config",
        default=None,
        help="Main configuration file whose defaults apply (optional)",
    )
    parser_validate.set_defaults(func=cmd_validate)

    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
