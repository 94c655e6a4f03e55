"""
Event Parser CLI

Turn natural language into calendar entries from the terminal.

Usage:
    python -m event_parser "Lunch at 12pm on 6/15"     # Human readable event
    python -m event_parser --ics "Dinner at 7"          # iCalendar text
    python -m event_parser --todo --ics "Taxes by 4/15"  # As a VTODO
    echo "Meeting 7-9pm" | python -m event_parser       # One event per stdin line
"""
import argparse
import sys
from datetime import datetime
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from rich.console import Console

from .core.base.exceptions import CalendarModelError
from .core.calendar import Calendar, format_event, to_event
from .utils.config import Config, get_config
from .utils.logger import setup_logger


def setup_environment():
    """Setup environment for CLI usage."""
    load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="event-parser",
        description="Turn free-form text into calendar events"
    )
    parser.add_argument("text", nargs="*", help="Event description; read from stdin when omitted")
    parser.add_argument("--ics", action="store_true", help="Print iCalendar text instead of a summary")
    parser.add_argument("--todo", action="store_true", help="Emit VTODO components instead of VEVENTs")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument(
        "--reference",
        type=datetime.fromisoformat,
        help="Reference instant in ISO format (defaults to now)"
    )
    return parser


def _inputs(args) -> List[str]:
    if args.text:
        return [" ".join(args.text)]
    return [line.strip() for line in sys.stdin if line.strip()]


def run(args, config: Config, console: Console) -> int:
    events = [to_event(text, args.reference, config) for text in _inputs(args)]
    if not events:
        console.print("[dim]Nothing to parse.[/]")
        return 1

    if not args.ics:
        for event in events:
            console.print(format_event(event), markup=False, highlight=False, soft_wrap=True)
        return 0

    calendar = Calendar(config.calendar)
    for event in events:
        calendar.push(event.to_todo() if args.todo else event.to_component())
    sys.stdout.write(calendar.done().to_ics())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    setup_environment()
    args = build_parser().parse_args(argv)
    console = Console(stderr=False)
    err_console = Console(stderr=True)

    try:
        config = get_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        err_console.print(f"[red]Failed to load config: {e}[/]")
        return 2

    setup_logger(__name__, level=config.logging.level, log_file=config.logging.file)

    try:
        return run(args, config, console)
    except CalendarModelError as e:
        err_console.print(f"[red]Failed to build calendar: {e.message}[/]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
