"""Command-line entry for callboard.

Subcommands work on JSON files holding already-fetched records:

  ics              export events (or one audition's schedule) as an .ics file
  pdf              render a calendar listing or an actor resume as PDF
  validate-agenda  check an agenda item window against its rehearsal window
  location         parse free-text locations into city/state
  conflicts        per-day conflict report as CSV or plain text
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from . import _init_logging
from .config import Config, ConfigManager
from .conflicts import (
    build_conflict_csv,
    build_conflict_days,
    build_conflict_plain_text,
    conflict_events_from,
    date_key_in,
)
from .event_generator import generate_audition_calendar_events
from .exceptions import CallboardError
from .ics_export import ics_filename, to_ics
from .location import parse_location
from .logging_config import configure_logging, export_context
from .models import CalendarEvent, PersonalEvent, ResumeData, ShowDetails, WatermarkSettings
from .pdf_export import build_calendar_pdf, build_resume_pdf, calendar_pdf_filename, resume_filename
from .time_range import quick_select_times, validate_within_bounds

logger = logging.getLogger(__name__)


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the callboard CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="callboard",
        description="Callboard - audition and production calendar tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  callboard ics events.json -o rehearsals.ics --name "Hamlet Rehearsals"
  callboard pdf calendar.json --kind calendar
  callboard validate-agenda 19:00 22:00 19:30 20:15
  callboard location "123 Main St, Springfield, IL 62701"
  callboard conflicts busy.json --hide-names --user "Jamie Doe"
        """,
    )
    parser.add_argument("--config", type=Path, metavar="PATH", help="YAML config file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    ics = sub.add_parser("ics", help="Export events as ICS")
    ics.add_argument("input", type=Path, help="JSON list of events, or {audition, slots, callback_slots}")
    ics.add_argument("-o", "--output", type=Path, help="Output file (default: <name>_calendar.ics)")
    ics.add_argument("--name", help="Calendar name (default from config)")

    pdf = sub.add_parser("pdf", help="Render a calendar or resume PDF")
    pdf.add_argument("input", type=Path, help="JSON document for the chosen kind")
    pdf.add_argument("--kind", choices=("calendar", "resume"), default="calendar")
    pdf.add_argument("-o", "--output", type=Path, help="Output file")

    agenda = sub.add_parser("validate-agenda", help="Validate an agenda item time window")
    agenda.add_argument("bound_start", help="Rehearsal start (HH:MM)")
    agenda.add_argument("bound_end", help="Rehearsal end (HH:MM)")
    agenda.add_argument("start", nargs="?", help="Agenda item start (HH:MM)")
    agenda.add_argument("end", nargs="?", help="Agenda item end (HH:MM)")
    agenda.add_argument("--suggest", action="store_true", help="Print quick-select times instead")

    location = sub.add_parser("location", help="Parse locations into city/state")
    location.add_argument("locations", nargs="+", help="Free-text addresses")

    conflicts = sub.add_parser("conflicts", help="Per-day conflict report")
    conflicts.add_argument("input", type=Path, help="JSON list of events with id, title, start, end")
    conflicts.add_argument("--csv", action="store_true", help="CSV instead of plain text")
    conflicts.add_argument("--hide-names", action="store_true", help='Show every event as "Busy"')
    conflicts.add_argument("--user", default="My Calendar", help="Name shown in the plain-text header")
    conflicts.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")

    return parser


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CallboardError(f"Unable to read {path}: {e}") from e


def _write_output(data: str | bytes, output: Optional[Path]) -> None:
    if output is None:
        if isinstance(data, bytes):
            sys.stdout.buffer.write(data)
        else:
            sys.stdout.write(data + "\n")
        return
    if isinstance(data, bytes):
        output.write_bytes(data)
    else:
        output.write_text(data, encoding="utf-8")
    logger.info("Wrote %s", output)


def _cmd_ics(args: argparse.Namespace, config: Config) -> int:
    payload = _read_json(args.input)
    if isinstance(payload, dict) and "audition" in payload:
        events = generate_audition_calendar_events(
            payload["audition"], payload.get("slots", []), payload.get("callback_slots", [])
        )
    else:
        events = [CalendarEvent.model_validate(item) for item in payload]

    name = args.name or config.calendar_name
    text = to_ics(events, name, config.calendar_timezone, config.prodid, config.uid_domain)
    output = args.output or Path(ics_filename(name))
    output.write_bytes(text.encode("utf-8"))
    logger.info("Exported %d events to %s", len(events), output)
    return 0


def _cmd_pdf(args: argparse.Namespace, config: Config) -> int:
    payload = _read_json(args.input)
    if args.kind == "resume":
        resume = ResumeData.model_validate(payload)
        watermark = payload.get("watermark")
        if watermark is not None:
            watermark = WatermarkSettings.model_validate(
                {"opacity": config.watermark_opacity, **watermark}
            )
        data = build_resume_pdf(resume, config.pdf_branding, watermark, config.logo_timeout_seconds)
        output = args.output or Path(resume_filename(resume.profile.full_name))
    else:
        show = ShowDetails.model_validate(payload["show"])
        events = [CalendarEvent.model_validate(item) for item in payload.get("events", [])]
        data = build_calendar_pdf(
            events,
            show,
            payload.get("actor_name", ""),
            payload.get("audience", "actor"),
            config.calendar_timezone,
        )
        output = args.output or Path(calendar_pdf_filename(show.title))

    _write_output(data, output)
    return 0


def _cmd_validate_agenda(args: argparse.Namespace, config: Config) -> int:
    if args.suggest:
        for value in quick_select_times(args.bound_start, args.bound_end, config.quick_select_step_minutes):
            print(value)
        return 0

    if args.start is None or args.end is None:
        print("error: start and end are required unless --suggest is given", file=sys.stderr)
        return 2

    validate_within_bounds(args.bound_start, args.bound_end, args.start, args.end)
    print("OK")
    return 0


def _cmd_location(args: argparse.Namespace, config: Config) -> int:
    results = []
    for text in args.locations:
        parsed = parse_location(text)
        results.append(parsed.model_dump() if parsed else {"formatted_address": text})
    print(json.dumps(results, indent=2))
    return 0


def _cmd_conflicts(args: argparse.Namespace, config: Config) -> int:
    payload = _read_json(args.input)
    events = conflict_events_from(
        [PersonalEvent.model_validate(item) for item in payload], config.calendar_timezone
    )
    days = build_conflict_days(events, date_key_in(config.calendar_timezone))
    if args.csv:
        text = build_conflict_csv(days, not args.hide_names, config.calendar_timezone)
    else:
        text = build_conflict_plain_text(days, args.user, not args.hide_names, config.calendar_timezone)
    _write_output(text, args.output)
    return 0


COMMANDS = {
    "ics": _cmd_ics,
    "pdf": _cmd_pdf,
    "validate-agenda": _cmd_validate_agenda,
    "location": _cmd_location,
    "conflicts": _cmd_conflicts,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Run the callboard CLI and return the process exit code."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        config = ConfigManager().load(args.config)
    except CallboardError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    _init_logging("DEBUG" if args.debug else config.log_level)
    configure_logging(debug_mode=args.debug)

    try:
        with export_context():
            return COMMANDS[args.command](args, config)
    except (CallboardError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
