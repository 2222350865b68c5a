#!/usr/bin/env python3
"""
EQBAL PLANNER CLI - inspect and adjust a layout file.

A layout file is JSON: {"balances": [...], "events": [...],
"eventValues": {...}, "timePeriod": 5}. `default` prints a starter layout.
"""

import json
import logging
import sys
from pathlib import Path

from eqbal import collision
from eqbal.config import LOG_LEVEL
from eqbal.observability import configure_logging
from eqbal.timeline import Timeline

logger = logging.getLogger(__name__)


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def print_table(headers: list, rows: list, widths: list = None):
    """Print a simple table."""
    if not widths:
        widths = [max(len(str(row[i])) for row in [headers] + rows) for i in range(len(headers))]

    header_str = " │ ".join(str(h).ljust(w) for h, w in zip(headers, widths))
    print(header_str)
    print("─" * len(header_str))

    for row in rows:
        print(" │ ".join(str(c)[:w].ljust(w) for c, w in zip(row, widths)))


def load_layout(path: str) -> Timeline:
    """Read a layout file, exiting with status 1 if it cannot be used."""
    try:
        data = json.loads(Path(path).read_text())
        return Timeline.from_dict(data)
    except OSError as e:
        print(f"Error: cannot read {path}: {e}")
        sys.exit(1)
    except (json.JSONDecodeError, ValueError) as e:
        print(f"Error: invalid layout in {path}: {e}")
        sys.exit(1)


def save_layout(path: str, timeline: Timeline):
    """Write a layout file back, exiting with status 1 if it cannot be written."""
    try:
        Path(path).write_text(json.dumps(timeline.to_dict(), indent=2) + "\n")
    except OSError as e:
        print(f"Error: cannot write {path}: {e}")
        sys.exit(1)


def _require_event(timeline: Timeline, name: str):
    event = timeline.get_event(name)
    if event is None:
        print(f"Unknown event: {name}")
        sys.exit(1)
    return event


def _parse_time(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        print(f"Invalid time: {raw}")
        sys.exit(1)


def cmd_periods(args):
    """Show consumption periods on a balance."""
    if len(args) < 2:
        print("Usage: periods <layout> <balance>")
        sys.exit(1)

    timeline = load_layout(args[0])
    balance = args[1]
    periods = timeline.consumption_periods(balance)

    print_header(f"CONSUMPTION: {balance}")
    if not periods:
        print("  Nothing consumes this balance.")
        return

    print_table(
        ["Event", "Start", "End"],
        [[p.event_name, p.start, p.end] for p in periods],
    )


def cmd_check(args):
    """Check whether an event may start at a time."""
    if len(args) < 3:
        print("Usage: check <layout> <event> <time> [balance]")
        sys.exit(1)

    timeline = load_layout(args[0])
    event = _require_event(timeline, args[1])
    t = _parse_time(args[2])

    if len(args) > 3:
        valid = collision.is_valid_placement(
            event.name, t, event, args[3], timeline.events, timeline.event_values
        )
        scope = args[3]
    else:
        valid = collision.is_valid_placement_all_balances(
            event.name, t, event, timeline.events, timeline.event_values
        )
        scope = ", ".join(event.balances()) or "no balances"

    print(f"{event.name} at {t} on {scope}: {'valid' if valid else 'CONFLICT'}")
    if not valid:
        sys.exit(2)


def cmd_place(args):
    """Find the earliest legal position for an event."""
    if len(args) < 2:
        print("Usage: place <layout> <event> [balance]")
        sys.exit(1)

    timeline = load_layout(args[0])
    event = _require_event(timeline, args[1])

    if len(args) > 2:
        t = collision.find_valid_placement(
            event.name,
            event,
            args[2],
            timeline.events,
            timeline.event_values,
            0,
            timeline.time_period,
        )
    else:
        t = collision.find_valid_placement_all_balances(
            event.name, event, timeline.events, timeline.event_values, 0, timeline.time_period
        )

    if t is None:
        print(f"No legal position for {event.name} in [0, {timeline.time_period}]")
        sys.exit(2)
    print(f"{event.name}: earliest legal position {t}")


def cmd_move(args):
    """Move an event to the nearest legal position and save the layout."""
    if len(args) < 3:
        print("Usage: move <layout> <event> <time> [balance]")
        sys.exit(1)

    timeline = load_layout(args[0])
    _require_event(timeline, args[1])
    requested = _parse_time(args[2])
    balance = args[3] if len(args) > 3 else None

    resolved = timeline.move_event(args[1], requested, balance)
    save_layout(args[0], timeline)

    if resolved == requested:
        print(f"{args[1]}: stays at {resolved}")
    else:
        print(f"{args[1]}: {requested} -> {resolved}")


def cmd_validate(args):
    """Report every conflict in a layout."""
    if len(args) < 1:
        print("Usage: validate <layout>")
        sys.exit(1)

    timeline = load_layout(args[0])
    report = timeline.validate()

    print_header("VALIDATION")
    if report.valid:
        print(f"  ✓ {len(timeline.events)} events, no conflicts")
        return

    for conflict in report.conflicts:
        print(f"  ✗ {conflict}")
    sys.exit(2)


def cmd_default(args):
    """Print a starter layout."""
    print(json.dumps(Timeline.default().to_dict(), indent=2))


def cmd_help(args):
    """Show help."""
    print_header("EQBAL PLANNER CLI")
    print("""
COMMANDS:

  periods <layout> <balance>             Consumption periods on a balance
  check <layout> <event> <t> [balance]   Is the event legal at time t
  place <layout> <event> [balance]       Earliest legal position
  move <layout> <event> <t> [balance]    Move to the nearest legal position to t and save
  validate <layout>                      All conflicts in the layout
  default                                Print a starter layout
  help                                   Show this help

Omitting [balance] checks every balance the event touches.
Exit status 2 means a conflict or no legal position.
""")


COMMANDS = {
    "periods": cmd_periods,
    "check": cmd_check,
    "place": cmd_place,
    "move": cmd_move,
    "m": cmd_move,
    "validate": cmd_validate,
    "v": cmd_validate,
    "default": cmd_default,
    "help": cmd_help,
    "h": cmd_help,
}


def main(argv: list[str] | None = None):
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    configure_logging(LOG_LEVEL, json_format=False)

    if not argv:
        cmd_help([])
        return

    cmd = argv[0]
    args = argv[1:]

    if cmd in COMMANDS:
        COMMANDS[cmd](args)
    else:
        print(f"Unknown command: {cmd}")
        print("Run 'help' for available commands.")
        sys.exit(1)


if __name__ == "__main__":
    main()
