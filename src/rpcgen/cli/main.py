# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Command-line entry point for rpcgen."""

import argparse
import dataclasses
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import TextIO

from rpcgen.codegen.generator import GenerationError, plan, render
from rpcgen.config.options import ConfigError, GeneratorConfig, load_config
from rpcgen.model.entities import Schema
from rpcgen.schema.loader import SchemaError, load_schema
from rpcgen.verification.checks import VerificationResult

# ###############
# Public Interface
# ###############


def main() -> None:
    """Main entry point for the rpcgen CLI."""
    parser = argparse.ArgumentParser(
        prog="rpcgen",
        description="Generate a typed Kotlin RPC client from a backend resource schema",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the Kotlin client",
        description="Verify the schema and write the generated Kotlin client to the output file.",
    )
    _add_common_arguments(generate_parser)
    generate_parser.add_argument(
        "--output",
        default=None,
        help="Path of the generated Kotlin file (overrides output-file from the config)",
    )
    generate_parser.add_argument(
        "--stdout",
        action="store_true",
        default=False,
        help="Print the generated client instead of writing it to a file",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Verify the schema without generating",
        description="Run every verification check and report the findings.",
    )
    _add_common_arguments(check_parser)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("schema", help="Path to the schema file (.yaml, .yml or .json)")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the generator configuration file (default: built-in defaults)",
    )
    parser.add_argument(
        "--package",
        default=None,
        help="Kotlin package of the generated file (overrides package-name from the config)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Enable debug logging")


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "check":
        return _cmd_check(args)
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    loaded = _load_inputs(args)
    if loaded is None:
        return 1
    schema, config = loaded

    generation = plan(schema, config)
    _print_warnings(generation.result, file=sys.stderr)
    try:
        source = render(schema, config, generation)
    except GenerationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.stdout:
        sys.stdout.write(source)
        return 0

    output = Path(config.output_file)
    try:
        _write_atomically(output, source)
    except OSError as exc:
        print(f"Error: cannot write '{output}': {exc}", file=sys.stderr)
        return 1

    print(f"Generated Kotlin client: {output}")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    loaded = _load_inputs(args)
    if loaded is None:
        return 1
    schema, config = loaded

    result = plan(schema, config).result
    _print_warnings(result)
    if result.has_errors:
        print(f"Error: verification failed.\n\n{result.format_report()}", file=sys.stderr)
        return 1

    print("No issues found.")
    return 0


def _print_warnings(result: VerificationResult, file: TextIO | None = None) -> None:
    for warning in result.warnings:
        print(f"Warning: {warning.message}", file=file)


def _load_inputs(args: argparse.Namespace) -> tuple[Schema, GeneratorConfig] | None:
    try:
        config = load_config(Path(args.config)) if args.config is not None else GeneratorConfig()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None

    if args.package is not None:
        config = dataclasses.replace(config, package_name=args.package)
    if getattr(args, "output", None) is not None:
        config = dataclasses.replace(config, output_file=args.output)

    try:
        schema = load_schema(Path(args.schema))
    except SchemaError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None

    return schema, config


def _write_atomically(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
