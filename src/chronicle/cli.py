"""Command-line entry point for chronicle."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from . import __version__
from .config import ChronicleConfig, get_settings, load_config, save_config
from .errors import ChronicleError, ConfigError
from .orchestrator import ChronicleRunner, parse_only
from .renderer import Renderer
from .state import StateStore

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)
CHRONICLE_PREFIX = "chronicle-"


def configure_logging(level: str) -> None:
    """Configure root logging for the chronicle CLI."""

    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def _config_path(args: argparse.Namespace) -> Path:
    explicit = getattr(args, "config", None)
    return Path(explicit) if explicit else get_settings().config_path


def parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ConfigError(f"Invalid date format: {exc}") from exc


def parse_since(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp; a trailing ``Z`` and a missing offset mean UTC."""

    if value is None:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ConfigError(f"Invalid since timestamp: {exc}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def cmd_config_init(args: argparse.Namespace) -> None:
    config_path = Path(args.path) if args.path else get_settings().config_path
    if config_path.exists():
        print(f"Configuration file already exists at: {config_path}", file=sys.stderr)
        print("Remove it first if you want to reinitialize.", file=sys.stderr)
        return

    config = ChronicleConfig()
    if not config.output_dir.exists():
        config.output_dir.mkdir(parents=True, exist_ok=True)
        print(f"Created output directory: {config.output_dir}")

    save_config(config, config_path)
    print(f"Configuration file created: {config_path}")
    print()
    print("Next steps:")
    print(f"1. Edit {config_path} to configure your repositories and files")
    print("2. Run 'chronicle gen' to generate your first chronicle")


def cmd_gen(args: argparse.Namespace) -> None:
    config = load_config(_config_path(args))
    chronicle_date = parse_date(args.date)
    since = parse_since(args.since) or datetime.now(timezone.utc) - DEFAULT_WINDOW
    kinds = parse_only(args.only)

    store = StateStore(config.state_file)
    previous = store.load()

    runner = ChronicleRunner(config)
    result = runner.run(previous, since=since, date=chronicle_date, only=kinds)
    chronicle = result.chronicle

    if not chronicle.has_activity():
        print("No activity to report.")
        if not args.dry_run:
            store.save(result.state)
        return

    markdown = Renderer(config).render(chronicle)
    if args.dry_run:
        print(markdown)
        return

    config.output_dir.mkdir(parents=True, exist_ok=True)
    output_path = config.output_dir / f"{CHRONICLE_PREFIX}{chronicle.date.strftime('%Y-%m-%d')}.md"
    output_path.write_text(markdown + "\n", encoding="utf-8")
    print(f"Chronicle written to: {output_path}")

    store.save(result.state)
    logger.info(
        "Chronicle generated",
        extra={
            "output": str(output_path),
            "skipped_sources": len(result.skipped),
        },
    )


def find_latest_chronicle(output_dir: Path) -> Path:
    if not output_dir.exists():
        raise ConfigError(f"Output directory does not exist: {output_dir}")

    chronicles = sorted(
        path
        for path in output_dir.iterdir()
        if path.is_file() and path.name.startswith(CHRONICLE_PREFIX) and path.name.endswith(".md")
    )
    if not chronicles:
        raise ConfigError("No chronicle files found. Run 'chronicle gen' first.")
    # File names embed the date, so lexical order is chronological.
    return chronicles[-1]


def cmd_show_latest(args: argparse.Namespace) -> None:
    config = load_config(_config_path(args))
    latest = find_latest_chronicle(config.output_dir)
    print(latest.read_text(encoding="utf-8"))


def cmd_state_reset(args: argparse.Namespace) -> None:
    config = load_config(_config_path(args))
    store = StateStore(config.state_file)
    if store.reset():
        print(f"State file deleted: {store.path}")
        print("Next 'chronicle gen' will generate a full chronicle.")
    else:
        print(f"State file does not exist: {store.path}")
        print("Nothing to reset.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chronicle",
        description="Generate daily chronicles from Git, TODOs, and notes",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="cmd")

    p_config = sub.add_parser("config", help="Configuration commands")
    config_sub = p_config.add_subparsers(dest="config_cmd")
    p_init = config_sub.add_parser("init", help="Initialize chronicle.yaml configuration file")
    p_init.add_argument("--path", help="Path where to create the config file")
    p_init.set_defaults(func=cmd_config_init)

    p_gen = sub.add_parser("gen", help="Generate a daily chronicle")
    p_gen.add_argument("-c", "--config", help="Path to config file")
    p_gen.add_argument("--date", help="Date for the chronicle (YYYY-MM-DD, defaults to today)")
    p_gen.add_argument("--since", help="RFC 3339 start of the window (defaults to 24 hours ago)")
    p_gen.add_argument("--only", help="Comma-separated source kinds: git, todos, notes")
    p_gen.add_argument(
        "--dry-run",
        action="store_true",
        help="Print to stdout instead of writing a file; state is not saved",
    )
    p_gen.set_defaults(func=cmd_gen)

    p_show = sub.add_parser("show", help="Show commands")
    show_sub = p_show.add_subparsers(dest="show_cmd")
    p_latest = show_sub.add_parser("latest", help="Display the most recent chronicle")
    p_latest.add_argument("-c", "--config", help="Path to config file")
    p_latest.set_defaults(func=cmd_show_latest)

    p_state = sub.add_parser("state", help="State management commands")
    state_sub = p_state.add_subparsers(dest="state_cmd")
    p_reset = state_sub.add_parser("reset", help="Reset state tracking")
    p_reset.add_argument("-c", "--config", help="Path to config file")
    p_reset.set_defaults(func=cmd_state_reset)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the chronicle CLI."""

    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        configure_logging(get_settings().log_level)
        args.func(args)
    except ChronicleError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
