# File: modelts/cli.py
"""
modelts - Command-Line Interface
==================================

Usage examples::

    # Print the types for every model in a module
    python -m modelts -m app.models

    # Write them to a file, several modules, verbose
    modelts -m app.models -m billing.models -o frontend/src/models.ts -v

    # Reflect column types from a live database instead of the mappings
    modelts -m app.models -o models.ts --database-url postgresql://localhost/app

    # Settings from a YAML/JSON file, overridden on the command line
    modelts -m app.models -c modelts.yaml --type-keyword interface

Exit codes:
    0 - success
    2 - generation error (a model failed to transform)
    3 - export error (output could not be written)
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError

from modelts.exporters import ExportReport, TypeScriptExporter, collect_models
from modelts.introspection import load_dialect
from modelts.models import TransformerConfig
from modelts.transformer import ModelTransformer
from modelts.utils import load_config_file

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelts")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root modelts logger based on verbosity level.

    Args:
        verbosity: -1 = silent, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity < 0:
        level = logging.CRITICAL + 1
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("modelts")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from modelts import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="modelts",
        description=(
            "Generate TypeScript types from SQLAlchemy models.\n\n"
            "Columns, computed (__appends__) fields and relationships of each "
            "mapped class become one exported TypeScript type."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -m app.models\n"
            "  %(prog)s -m app.models -o src/models.ts -v\n"
            "  %(prog)s -m app.models -c modelts.yaml --type-keyword interface\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Input / output
    io_group = parser.add_argument_group("Input / Output")
    io_group.add_argument(
        "-m",
        "--module",
        dest="modules",
        action="append",
        required=True,
        metavar="MODULE",
        help="Dotted module whose mapped classes are exported (repeatable).",
    )
    io_group.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        metavar="PATH",
        help="Output .ts file. Prints to stdout when omitted.",
    )
    io_group.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        metavar="FILE",
        help="YAML or JSON file with TransformerConfig settings.",
    )

    # Generation options
    gen_group = parser.add_argument_group("Generation")
    gen_group.add_argument(
        "--dialect",
        type=str,
        default=None,
        help="SQLAlchemy dialect used to name column types (default: postgresql).",
    )
    gen_group.add_argument(
        "--database-url",
        type=str,
        default=None,
        metavar="URL",
        help="Reflect column types from this database instead of the mappings.",
    )
    gen_group.add_argument(
        "--type-keyword",
        choices=("type", "interface"),
        default=None,
        help="Emit 'export type X = {...}' or 'export interface X {...}'.",
    )
    gen_group.add_argument(
        "--skip-invalid",
        action="store_true",
        default=False,
        help="Leave out models that fail to transform instead of failing.",
    )
    gen_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render and report, but do not write the output file.",
    )

    # Verbosity
    verbosity_group = parser.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v = INFO, -vv = DEBUG).",
    )
    verbosity_group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=False,
        help="Suppress all log output.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, object] = {}

    if args.dialect is not None:
        overrides["dialect"] = args.dialect

    if args.type_keyword is not None:
        overrides["type_keyword"] = args.type_keyword

    return overrides


def _load_config(args: argparse.Namespace) -> TransformerConfig:
    """
    Merge the config file (if any) with CLI overrides.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the config is unreadable or invalid.
    """
    data: Dict[str, Any] = {}
    if args.config is not None:
        data = load_config_file(Path(args.config).resolve())
    data.update(_build_config_overrides(args))

    try:
        config: TransformerConfig = TransformerConfig(**data)
        load_dialect(config.dialect)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
    except ArgumentError as exc:
        raise ValueError(f"Unknown dialect '{data.get('dialect')}': {exc}") from exc
    return config


def _import_modules(names: Sequence[str]) -> List[ModuleType]:
    modules: List[ModuleType] = []
    for name in names:
        try:
            modules.append(importlib.import_module(name))
        except ImportError as exc:
            raise ValueError(f"Cannot import module '{name}': {exc}") from exc
    return modules


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _run_export(
    args: argparse.Namespace,
    config: TransformerConfig,
    modules: List[ModuleType],
    engine: Optional[Engine],
) -> int:
    """
    Run the transform + export step.

    Returns the appropriate exit code.
    """
    exporter: TypeScriptExporter = TypeScriptExporter(
        ModelTransformer(config, bind=engine),
        skip_invalid_models=args.skip_invalid,
    )
    models: List[Any] = collect_models(modules)
    logger.info("Found %d model(s) in %d module(s).", len(models), len(modules))

    if args.output is None:
        content, report = exporter.render(models)
        if report.success:
            sys.stdout.write(content)
    else:
        try:
            report = exporter.export(
                models, Path(args.output).resolve(), dry_run=args.dry_run
            )
        except OSError as exc:
            logger.error("Cannot write %s: %s", args.output, exc)
            return EXIT_EXPORT_ERROR

    _report(report, to_stdout=args.output is not None)
    return EXIT_SUCCESS if report.success else EXIT_GENERATION_ERROR


def _report(report: ExportReport, *, to_stdout: bool) -> None:
    for err in report.errors:
        logger.error("%s", err)
    if to_stdout:
        print(report.summary())
    else:
        logger.info("\n%s", report.summary())


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose

    _setup_logging(verbosity)

    try:
        config: TransformerConfig = _load_config(args)
        modules: List[ModuleType] = _import_modules(args.modules)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    engine: Optional[Engine] = None
    if args.database_url is not None:
        try:
            engine = create_engine(args.database_url)
        except (ArgumentError, ImportError) as exc:
            logger.error("Invalid database URL: %s", exc)
            sys.exit(EXIT_INPUT_ERROR)

    logger.info("Modules: %s", ", ".join(args.modules))
    logger.info("Output:  %s", args.output or "<stdout>")
    logger.info("Dialect: %s", engine.dialect.name if engine else config.dialect)

    try:
        exit_code: int = _run_export(args, config, modules, engine)
    finally:
        if engine is not None:
            engine.dispose()

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]
