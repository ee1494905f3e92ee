import argparse
import json
import logging
import sys
from datetime import datetime

from verso.config import settings


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def parse_text(text: str, now: str | None, timezone: str | None, as_json: bool) -> int:
    from verso.services.datetime_extractor import attach_timezone, resolve_timezone
    from verso.services.nlp import ReminderParser, format_parsed_summary

    parser = ReminderParser(timezone)

    reference = None
    if now:
        try:
            reference = datetime.fromisoformat(now)
        except ValueError:
            print(f"Error: --now must be an ISO 8601 datetime, got {now!r}", file=sys.stderr)
            return 2
        if reference.tzinfo is None and timezone:
            reference = attach_timezone(reference, resolve_timezone(timezone))

    parsed = parser.parse(text, reference)
    if parsed is None:
        print("Couldn't parse that. Try adding what to be reminded about.", file=sys.stderr)
        return 1

    if as_json:
        print(json.dumps(parsed.to_dict(), indent=2))
    else:
        print(format_parsed_summary(parsed, now=reference))
    return 0


def check_config() -> int:
    print("Verso Configuration Check\n")
    print(f"  User timezone: {settings.user_timezone}")
    print(f"  Default offset (no time given): {settings.default_offset_minutes} minutes")
    print(f"  Default hour (date without time): {settings.default_hour}:00")
    print(f"  Log level: {settings.log_level}")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Verso natural-language reminders")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    parse_cmd = subparsers.add_parser("parse", help="Parse reminder text and show the preview")
    parse_cmd.add_argument("text", nargs="+", help="Reminder text, e.g. 'call mum every sunday at 3pm'")
    parse_cmd.add_argument("--now", help="Reference instant (ISO 8601), defaults to the current time")
    parse_cmd.add_argument("--timezone", help="IANA timezone, defaults to USER_TIMEZONE")
    parse_cmd.add_argument("--json", action="store_true", help="Print the parsed fields as JSON")

    subparsers.add_parser("check", help="Check configuration")

    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "parse":
        sys.exit(parse_text(" ".join(args.text), args.now, args.timezone, args.json))
    elif args.command == "check":
        sys.exit(check_config())
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
