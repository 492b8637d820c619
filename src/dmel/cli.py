"""
Command-line interface.

    dmel translate EXPR --model model.yaml [--target r|python] [--person] [--lenient]
    dmel export model.yaml [--config export.yaml] [--target ...] [--output-dir ...]
                           [--table-format inline|csv]
    dmel analyze model.yaml
"""

import argparse
import logging
import sys
from typing import List, Optional

from dmel import __version__
from dmel.analyzer import analyze_model
from dmel.backends import PROFILES, get_profile
from dmel.config import ExportConfig, load_config
from dmel.errors import DMELError
from dmel.exporter import export_model
from dmel.serialization import load_model
from dmel.translator import translate

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dmel", description="Translate decision model expressions to R and Python"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_translate = sub.add_parser("translate", help="Translate a single expression")
    p_translate.add_argument("expression", help="Expression in the model mini-language")
    p_translate.add_argument("--model", required=True, help="Model file (.yaml or .json)")
    p_translate.add_argument("--target", default="r", choices=sorted(PROFILES))
    p_translate.add_argument("--person", action="store_true",
                             help="Translate variables as per-person references")
    p_translate.add_argument("--lenient", action="store_true",
                             help="Pass unknown symbols through with a warning")

    p_export = sub.add_parser("export", help="Export a model as R or Python code")
    p_export.add_argument("model", help="Model file (.yaml or .json)")
    p_export.add_argument("--config", help="Export configuration (YAML)")
    p_export.add_argument("--target", choices=sorted(PROFILES))
    p_export.add_argument("--output-dir")
    p_export.add_argument("--table-format", choices=["inline", "csv"])
    p_export.add_argument("--lenient", action="store_true",
                          help="Pass unknown symbols through with a warning")

    p_analyze = sub.add_parser("analyze", help="Report symbol usage and authoring problems")
    p_analyze.add_argument("model", help="Model file (.yaml or .json)")

    return parser


def _cmd_translate(args) -> int:
    model = load_model(args.model)
    print(translate(args.expression, model, get_profile(args.target),
                    person_level=args.person, strict=not args.lenient))
    return 0


def _cmd_export(args) -> int:
    config = load_config(args.config) if args.config else ExportConfig()
    config = config.with_overrides(
        target=args.target,
        output_dir=args.output_dir,
        table_format=args.table_format,
        strict_symbols=False if args.lenient else None,
    )
    model = load_model(args.model)
    result = export_model(model, config)
    print(f"Wrote {result.model_file}")
    print(f"Wrote {result.helpers_file} ({len(result.helpers)} helpers)")
    for path in result.csv_files:
        print(f"Wrote {path}")
    return 0


def _cmd_analyze(args) -> int:
    report = analyze_model(load_model(args.model))
    print(f"Model: {report.model_name}")
    print(f" Parameters: {report.total_parameters}")
    print(f" Variables: {report.total_variables}")
    print(f" Tables: {report.total_tables}")
    for kind, names in sorted(report.symbol_usage.items()):
        print(f" {kind}: {', '.join(sorted(names))}")
    print(f" Max nesting depth: {report.max_nesting_depth}")
    if report.warnings:
        print("\nWarnings:")
        for warning in report.warnings:
            print(f" - {warning}")
    return 1 if report.unknown_symbols else 0


COMMANDS = {
    "translate": _cmd_translate,
    "export": _cmd_export,
    "analyze": _cmd_analyze,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return COMMANDS[args.command](args)
    except (DMELError, ValueError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
