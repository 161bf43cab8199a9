"""Command line interface for the course planner.

Usage:
  python run_planner.py list
  python run_planner.py --catalog data/infile.txt show CSCI300
  python run_planner.py path CSCI400
  python run_planner.py validate
  python run_planner.py menu
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from visualizer.report import ReportRenderer

from .config import PlannerConfig, load_config
from .errors import CatalogError, CycleDetectedError
from .loader import load_catalog, normalize_key
from .planner import CheckStatus, CoursePlanner

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "catalog_analyzer"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> logging.Logger:
    """Attach console (stderr) and optional file handlers to the package logger."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    # One console handler, bound to the current sys.stderr
    for h in list(package_logger.handlers):
        if type(h) is logging.StreamHandler:
            package_logger.removeHandler(h)
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    package_logger.addHandler(console)

    if log_file is not None:
        # Avoid duplicate handlers if configure_logging is called more than once
        target = os.path.abspath(log_file)
        for h in list(package_logger.handlers):
            if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
                break
        else:
            fh = logging.FileHandler(target, encoding="utf-8")
            fh.setFormatter(logging.Formatter(LOG_FORMAT))
            package_logger.addHandler(fh)

    return package_logger


# --- Sub-commands ---

def _cmd_list(planner: CoursePlanner, args: argparse.Namespace, out: ReportRenderer) -> int:
    out.catalog(list(planner.records()))
    return 0


def _cmd_show(planner: CoursePlanner, args: argparse.Namespace, out: ReportRenderer) -> int:
    out.course_details(planner.course_details(normalize_key(args.key)))
    return 0


def _cmd_path(planner: CoursePlanner, args: argparse.Namespace, out: ReportRenderer) -> int:
    key = normalize_key(args.key)
    out.prerequisite_path(key, planner.topological_order(key))
    return 0


def _cmd_check(planner: CoursePlanner, args: argparse.Namespace, out: ReportRenderer) -> int:
    check = planner.check_prerequisites(normalize_key(args.key))
    out.prerequisite_check(check)
    return 1 if check.status is CheckStatus.CIRCULAR else 0


def _cmd_validate(planner: CoursePlanner, args: argparse.Namespace, out: ReportRenderer) -> int:
    report = planner.validate()
    out.validation(report)
    return 0 if report.ok else 1


def _cmd_order(planner: CoursePlanner, args: argparse.Namespace, out: ReportRenderer) -> int:
    try:
        order = planner.catalog_order()
    except CycleDetectedError as e:
        out.error(str(e))
        out.cycle_groups(planner.cycle_groups())
        return 1
    out.catalog_order(order)
    return 0


def _cmd_stats(planner: CoursePlanner, args: argparse.Namespace, out: ReportRenderer) -> int:
    out.stats(planner.stats())
    return 0


COMMANDS = {
    "list": _cmd_list,
    "show": _cmd_show,
    "path": _cmd_path,
    "check": _cmd_check,
    "validate": _cmd_validate,
    "order": _cmd_order,
    "stats": _cmd_stats,
}


# --- Interactive menu ---

def run_menu(
    config: PlannerConfig,
    out: ReportRenderer,
    input_fn: Callable[[str], str] = input,
    strict: bool = True,
) -> int:
    """Numbered menu loop: 1 load, 2 list, 3 search, 4 path, 5 check, 9 exit."""
    planner = CoursePlanner.from_config(config)
    out.line()

    while True:
        out.menu()
        try:
            choice = input_fn("\n    Please select an option (1-9): ").strip()
        except EOFError:
            break

        if not choice.isdigit():
            out.error("Invalid input - Please enter a number")
            continue
        if choice == "9":
            break

        try:
            if choice == "1":
                out.sub_header("Load Course Data")
                path = input_fn(f"    Enter file path (or press Enter for default '{config.catalog_file}'): ").strip()
                fresh = CoursePlanner.from_config(config)
                result = load_catalog(path or config.catalog_file, fresh, strict=strict)
                planner = fresh
                out.success(f"Course data successfully loaded ({result.loaded} courses)")
                if not result.report.ok:
                    out.warning(f"Some prerequisites could not be validated ({len(result.report)} problem(s))")
            elif choice == "2":
                out.catalog(list(planner.records()))
            elif choice == "3":
                out.sub_header("Course Search")
                key = normalize_key(input_fn("    Enter Course ID: "))
                out.course_details(planner.course_details(key))
            elif choice == "4":
                out.sub_header("Prerequisite Analysis")
                key = normalize_key(input_fn("    Enter Course ID: "))
                out.prerequisite_path(key, planner.topological_order(key))
                out.line()
            elif choice == "5":
                out.sub_header("Prerequisite Validation")
                key = normalize_key(input_fn("    Enter Course ID: "))
                out.prerequisite_check(planner.check_prerequisites(key))
                out.line()
            else:
                out.error("Invalid selection. Please try again.")
        except EOFError:
            break
        except (CatalogError, OSError) as e:
            logger.debug("Menu action %s failed: %s", choice, e)
            out.error(str(e))

    out.farewell()
    return 0


# --- Entry point ---

def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Browse a course catalog and analyze its prerequisite graph."
    )
    parser.add_argument("--config", default=None, help="YAML config file (default: config/planner_config.yaml)")
    parser.add_argument("--catalog", default=None, help="Catalog file to load (overrides catalog_file in the config)")
    parser.add_argument("--lenient", action="store_true", help="Skip malformed lines instead of aborting the load")
    parser.add_argument("--no-color", action="store_true", help="Disable coloured output")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO logs, -vv for DEBUG")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="Print every course in key order")
    for name, help_text in (
        ("show", "Show a course with its prerequisites and dependents"),
        ("path", "Print the prerequisite sequence leading to a course"),
        ("check", "Check a course's prerequisite structure"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("key", help="Course ID, e.g. CSCI300")
    sub.add_parser("validate", help="Report self references, duplicates and unknown prerequisites")
    sub.add_parser("order", help="Print a study order for the whole catalog")
    sub.add_parser("stats", help="Print prerequisite graph statistics")
    sub.add_parser("menu", help="Interactive menu")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)

    try:
        config = load_config(args.config)
    except CatalogError as e:
        ReportRenderer(stream=sys.stderr, color=False).error(str(e))
        return 1

    level = config.logging.level
    if args.verbose:
        level = "DEBUG" if args.verbose > 1 else "INFO"
    configure_logging(level, config.logging.log_file)

    color = config.color and not args.no_color
    out = ReportRenderer(color=color)
    err = ReportRenderer(stream=sys.stderr, color=color)
    strict = config.strict_load and not args.lenient

    if args.catalog:
        config.catalog_file = Path(args.catalog)

    if args.command == "menu":
        return run_menu(config, out, strict=strict)

    try:
        planner = CoursePlanner.from_config(config)
        load_catalog(config.catalog_file, planner, strict=strict)
        return COMMANDS[args.command](planner, args, out)
    except (CatalogError, OSError) as e:
        err.error(str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
