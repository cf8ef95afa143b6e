"""
Main entry point for notion-digest.
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from loguru import logger
from dotenv import load_dotenv

from .utils.config import Config, ConfigurationError
from .utils.timeutil import notion_date_payload, to_canonical, add_minutes
from .notion.client import NotionAPIError, NotionClient
from .notion.finder import MATCH_TOLERANCE_MINUTES
from .notion.submit import ACTIONS, apply_json, normalize_rows
from .digest.discord import run_daily_digest


def configure_logging(log_level="INFO", log_file=None):
    """Configure logging based on verbosity level."""
    logger.remove()  # Remove default handler

    # Add console handler
    logger.add(sys.stderr, level=log_level)

    # Add file handler if specified
    if log_file:
        log_path = Path("logs") / log_file
        log_path.parent.mkdir(exist_ok=True)
        logger.add(log_path, rotation="10 MB", retention="1 month", level=log_level)


def read_json_source(source: str):
    """Read JSON text from a file path, or stdin for ``-``."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def cmd_digest(args, config: Config) -> int:
    target = datetime.strptime(args.date, "%Y-%m-%d").date() if args.date else None
    message = run_daily_digest(config, target=target, dry_run=args.dry_run)
    if args.dry_run:
        print(message)
    return 0


def cmd_submit(args, config: Config) -> int:
    result = apply_json(read_json_source(args.source), args.action, config=config)
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0 if result.ok else 1


def cmd_check_dates(args, config: Config) -> int:
    """Log how each row's date would be written and matched."""
    for index, row in enumerate(normalize_rows(read_json_source(args.source))):
        if not isinstance(row, dict):
            logger.warning(f"#{index}: not a JSON object")
            continue

        value = row.get("date")
        is_range = isinstance(value, dict)
        start = value.get("start") if is_range else value
        end = value.get("end") if is_range else None

        try:
            start_iso = to_canonical(start) if value else None
            end_iso = to_canonical(end) if end else None
            upper_iso = end_iso or (add_minutes(start_iso, MATCH_TOLERANCE_MINUTES) if start_iso else None)
            payload = notion_date_payload(value)
        except ValueError as e:
            logger.error(f"#{index}: {e}")
            continue

        logger.info(f"#{index} title={row.get('title', '(no title)')}")
        logger.info(f"  input.date      : {json.dumps(value, ensure_ascii=False, default=str)}")
        logger.info(f"  notion.date     : {json.dumps(payload, ensure_ascii=False)}")
        logger.info(f"  filter.startIso : {start_iso}")
        logger.info(f"  filter.endIso   : {upper_iso}")
    return 0


def cmd_debug(args, config: Config) -> int:
    """Log configuration presence and the Notion types of the mapped columns."""
    for key, value in config.describe().items():
        logger.info(f"{key:<20}= {value}")

    mapping = config.column_mapping()
    logger.info(f"Column mapping: {mapping}")

    if not config.notion_api_token or not config.database_id:
        logger.warning("Skipping schema check, Notion is not configured")
        return 1

    try:
        schema = NotionClient(config.notion_api_token).get_schema(config.database_id)
    except NotionAPIError as e:
        logger.error(f"Could not read database schema: {e}")
        return 1

    for column in (mapping.title, mapping.date, mapping.status):
        field_type = schema.type_of(column)
        logger.info(f"{column}.type={field_type.value if field_type else None}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Notion Digest - post daily Notion tasks to Discord and manage records from JSON"
    )
    parser.add_argument(
        "--config",
        help="Specify configuration file path"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable detailed logging"
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to logs/<LOG_FILE>"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    digest = subparsers.add_parser("digest", help="Send the task digest for a day")
    digest.add_argument(
        "--date",
        help="Day to report as YYYY-MM-DD (default: today in Asia/Tokyo)"
    )
    digest.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the message instead of sending it"
    )
    digest.set_defaults(func=cmd_digest)

    submit = subparsers.add_parser("submit", help="Create or archive records from JSON")
    submit.add_argument(
        "source",
        help="JSON file with one object or a list of objects ('-' for stdin)"
    )
    submit.add_argument(
        "--action",
        choices=ACTIONS,
        default="create",
        help="create new records or archive matching ones (default: create)"
    )
    submit.set_defaults(func=cmd_submit)

    check = subparsers.add_parser("check-dates", help="Show normalized dates for JSON rows")
    check.add_argument(
        "source",
        help="JSON file with one object or a list of objects ('-' for stdin)"
    )
    check.set_defaults(func=cmd_check_dates)

    debug = subparsers.add_parser("debug", help="Show configuration and column types")
    debug.set_defaults(func=cmd_debug)

    return parser


def main(argv=None):
    """
    Main entry point for notion-digest.
    """
    # Load environment variables
    load_dotenv()

    args = build_parser().parse_args(argv)

    # Configure logging
    log_level = "DEBUG" if args.verbose else "INFO"
    configure_logging(log_level, log_file=args.log_file)

    logger.debug("Starting Notion Digest v{}", __import__("notion_digest").__version__)

    try:
        config = Config(args.config)
        sys.exit(args.func(args, config))
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(2)
    except (OSError, ValueError) as e:
        logger.error(f"Error in execution: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
