"""Command-line front door for filesurfer.

Opens a project headlessly, applies filters and selections through the same
session controller an interactive front end would use, and prints (or
copies) the assembled document.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace

from .backend import LocalBackend
from .config import OUTPUT_FORMATS
from .controller import SessionController
from .state import STATUS_ERROR


def _nonnegative_int(value: str) -> int:
    """argparse type for non-negative integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filesurfer",
        description="Assemble selected project files into one document for pasting into an LLM.",
    )
    parser.add_argument("path", nargs="?", default=".", help="Project directory. Defaults to current directory.")
    parser.add_argument("--query", default="", help="Only include files or directories whose name contains this text.")
    parser.add_argument(
        "--ext",
        action="append",
        default=[],
        metavar="EXT",
        help="Only include files with this extension (repeatable, e.g. --ext .py).",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Glob of files to leave out of the selection (repeatable).",
    )
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default=None, help="Output format.")
    parser.add_argument("--max-file-size-mb", type=_nonnegative_int, default=None, help="Elide files above this size.")
    parser.add_argument("--git-only", action="store_true", help="Only include git-tracked files.")
    parser.add_argument(
        "--workspace",
        action="store_true",
        help="Use the selection saved for this project instead of selecting every displayed file.",
    )
    parser.add_argument("--imports", action="store_true", help="Also include local files imported by the selection.")
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--copy", action="store_true", help="Copy the document to the clipboard instead of printing.")
    actions.add_argument("--output", metavar="FILE", default=None, help="Write the document to FILE instead of printing.")
    actions.add_argument(
        "--analyze",
        action="store_true",
        help="List function definitions and TODO comments of the selected files instead of the document.",
    )
    actions.add_argument("--project-type", action="store_true", help="Print the detected project type and exit.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def _failure_message(controller: SessionController, fallback: str) -> str:
    status = controller.state.status
    return status.message if status.kind == STATUS_ERROR else fallback


async def _print_project_type(controller: SessionController) -> int:
    detected = await controller.detect_project_type()
    controller.persistor.cancel()
    await controller.drain()
    if detected is None:
        print("Could not detect project type", file=sys.stderr)
        return 1
    print(f"{detected.detected_type} (confidence {detected.confidence:.2f})")
    if detected.indicators:
        print("Indicators: " + ", ".join(detected.indicators))
    return 0


async def _print_analysis(controller: SessionController) -> None:
    analysis = await controller.analyze_selection()
    root = controller.state.root
    for function in analysis.functions:
        location = os.path.relpath(function.file, root)
        print(f"{location}:{function.line_start}-{function.line_end} {function.signature}")
    for todo in analysis.todos:
        location = os.path.relpath(todo.file, root)
        print(f"{location}:{todo.line_number} {todo.todo_type}: {todo.message}")


async def run(args: argparse.Namespace) -> int:
    controller = SessionController(LocalBackend())
    if not await controller.open_project(args.path):
        print(controller.state.status.message, file=sys.stderr)
        return 1

    if args.project_type:
        return await _print_project_type(controller)

    config = controller.state.config
    overrides = {}
    if args.max_file_size_mb is not None:
        overrides["max_file_size_mb"] = args.max_file_size_mb
    if args.git_only and not config.git_only_mode:
        overrides["git_only_mode"] = True
    if overrides:
        controller.state.config = replace(config, **overrides)
        if "git_only_mode" in overrides:
            await controller.rescan()
    if args.format is not None:
        controller.state.output_format = args.format

    if args.ext:
        controller.set_extensions(args.ext)
    if args.query:
        controller.set_query(args.query)
        controller.commit_query_now()

    if not args.workspace:
        controller.select_all()
    if args.exclude:
        controller.apply_inverse_selection(args.exclude)
    if args.imports:
        await controller.detect_imports()
    # Earlier previews may predate the overrides; only the newest applies.
    controller.refresh_preview()

    # Headless runs never overwrite the saved workspace.
    controller.persistor.cancel()
    await controller.drain()

    if controller.state.status.kind == STATUS_ERROR:
        print(controller.state.status.message, file=sys.stderr)
        return 1

    if args.analyze:
        await _print_analysis(controller)
        return 0

    if args.output:
        if not await controller.export_preview(args.output):
            print(_failure_message(controller, "Nothing to export"), file=sys.stderr)
            return 1
        print(controller.state.status.message, file=sys.stderr)
        return 0

    if args.copy:
        if not await controller.copy_to_clipboard():
            print(_failure_message(controller, "Nothing to copy"), file=sys.stderr)
            return 1
        print(controller.state.status.message, file=sys.stderr)
        return 0

    sys.stdout.write(controller.preview_content)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and print the assembled document."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
