"""Command-line entry point.

Usage::

    tsed-cli init my-project --platform express --package-manager npm
    tsed-cli generate controller User --route /users
    tsed-cli g service Calendar
    tsed-cli add @tsed/mongoose mongoose@^5.10.0
    tsed-cli add -D @types/mongoose
    tsed-cli run build
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
import traceback
from pathlib import Path
from typing import Any, Sequence

from rich.markup import escape

from .commands import (
    AddCommand,
    CommandProvider,
    GenerateCommand,
    InitCommand,
    RunCommand,
    run_provider,
)
from .commands.generate import DECORATOR_TYPES, MIDDLEWARE_POSITIONS, PLATFORMS, PROVIDER_TYPES
from .config import CliConfig
from .manifest import ProjectPackageJson
from .tasks import TaskResult
from .utils import (
    CommandResult,
    TsedCliError,
    console,
    format_duration,
    print_error,
    print_success,
    print_warning,
)

COMMAND_ALIASES = {"g": "generate"}

COMMANDS: dict[str, type[CommandProvider]] = {
    "generate": GenerateCommand,
    "init": InitCommand,
    "add": AddCommand,
    "run": RunCommand,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsed-cli",
        description="Ts.ED CLI -- scaffold Ts.ED projects and manage their package.json",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  tsed-cli init my-project --platform koa\n"
            "  tsed-cli generate controller User --route /users\n"
            "  tsed-cli add -D typescript@^4.0.0\n"
        ),
    )
    parser.add_argument(
        "--root-dir", "-r",
        default=None,
        help="Project root directory (default: current directory)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Forward --verbose to the package manager",
    )
    parser.add_argument(
        "--package-manager", "-m",
        choices=["yarn", "npm"],
        default=None,
        help="Package manager used to install dependencies (default: yarn)",
    )
    parser.add_argument(
        "--tsed-version",
        default=None,
        help="Ts.ED version substituted into {{tsedVersion}}",
    )
    parser.add_argument(
        "--skip-prompt", "-y",
        action="store_true",
        help="Do not ask questions; use the command line and the defaults",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    generate = subparsers.add_parser(
        "generate", aliases=["g"], help="Generate a new provider class"
    )
    generate.add_argument(
        "type",
        nargs="?",
        help=f"Provider type ({', '.join(p.value for p in PROVIDER_TYPES)})",
    )
    generate.add_argument("name", nargs="?", help="Provider name")
    generate.add_argument("--route", default=None, help="Route of a controller or server")
    generate.add_argument(
        "--platform", choices=[c.value for c in PLATFORMS], default=None, help="Server platform"
    )
    generate.add_argument(
        "--template-type",
        choices=[c.value for c in DECORATOR_TYPES],
        default=None,
        help="Decorator flavour",
    )
    generate.add_argument(
        "--middleware-position",
        choices=[c.value for c in MIDDLEWARE_POSITIONS],
        default=None,
        help="When a middleware decorator runs relative to the endpoint",
    )

    init = subparsers.add_parser("init", help="Create a new Ts.ED project")
    init.add_argument(
        "name", nargs="?", default=None, help="Project name; a sub-directory is created for it"
    )
    init.add_argument(
        "--platform", choices=[c.value for c in PLATFORMS], default=None, help="Server platform"
    )

    add = subparsers.add_parser("add", help="Add packages to package.json and install them")
    add.add_argument("packages", nargs="+", help="Packages as name[@version]")
    add.add_argument("--dev", "-D", action="store_true", help="Add to devDependencies")

    run = subparsers.add_parser("run", help="Run a package.json script")
    run.add_argument("script", help="Script name")
    run.add_argument(
        "--ignore-error", action="store_true", help="Exit successfully when the script fails"
    )

    return parser


def build_config(args: argparse.Namespace) -> CliConfig:
    """Environment configuration overridden by the command-line options."""
    config = CliConfig.from_env()
    config.command = COMMAND_ALIASES.get(args.command, args.command)

    if args.root_dir:
        config.root_dir = Path(args.root_dir).expanduser().resolve()
    if args.verbose is not None:
        config.verbose = args.verbose
    if args.package_manager:
        config.package_manager = args.package_manager
    if args.tsed_version:
        config.tsed_version = args.tsed_version

    if config.command == "init" and args.name and args.name != ".":
        config.root_dir = config.root_dir / args.name
    if config.command == "init" and not config.name:
        config.name = config.root_dir.name

    return config


def initial_answers(args: argparse.Namespace) -> dict[str, Any]:
    """Answers already given on the command line."""
    excluded = {"command", "root_dir", "verbose", "tsed_version", "skip_prompt"}
    answers = {
        key: value for key, value in vars(args).items() if key not in excluded and value is not None
    }
    if answers.get("name") == ".":
        answers.pop("name")
    return answers


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


async def run_cli(args: argparse.Namespace) -> list[TaskResult]:
    config = build_config(args)
    package_json = ProjectPackageJson(config)
    if config.command != "init" and config.project_root is None:
        print_warning(f"No package.json found in {escape(str(config.root_dir))} or its parents")

    provider = COMMANDS[config.command](config, package_json)

    return await run_provider(
        provider,
        initial_answers(args),
        interactive=not args.skip_prompt,
    )


def print_script_output(results: list[TaskResult]) -> None:
    for result in results:
        if isinstance(result.value, CommandResult) and result.value.stdout:
            console.print(escape(result.value.stdout))


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``tsed-cli`` and ``python -m tsed_cli.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    start = time.monotonic()
    try:
        results = asyncio.run(run_cli(args))
    except TsedCliError as exc:
        print_error(escape(str(exc)))
        sys.exit(1)
    except KeyboardInterrupt:
        print_error("Aborted")
        sys.exit(1)
    except Exception as exc:
        print_error(f"Unexpected error: {escape(str(exc))}")
        console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        sys.exit(1)

    if args.command == "run":
        print_script_output(results)
    else:
        command = COMMAND_ALIASES.get(args.command, args.command)
        print_success(f"{command} completed in {format_duration(time.monotonic() - start)}")


if __name__ == "__main__":
    main()
