"""Command line entry point: schedule the reminders for the coming week."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from config.config import LOG_LEVELS, AppConfig, ConfigurationError, load_config, validate_config
from agenda_ccb.agenda.loader import AgendaError
from agenda_ccb.reminders.reminder_service import ReminderService, RunSummary
from agenda_ccb.utils.logger import setup_logging, log_critical, log_warning


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agenda-reminders",
        description="Schedule push reminders for upcoming agenda events.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to the YAML configuration")
    parser.add_argument("--agenda", type=str, default=None, help="Path to agenda.json (overrides config)")
    parser.add_argument("--dry-run", action="store_true", help="Plan reminders without submitting them")
    parser.add_argument("--log-level", default=None, type=str.upper, choices=LOG_LEVELS, help="Logging level")
    return parser


async def run_once(config: AppConfig, dry_run: bool = False) -> RunSummary:
    """Run one scheduling pass with a service built from ``config``."""
    async with ReminderService(config, dry_run=dry_run) as service:
        return await service.run()


def main(argv: Optional[List[str]] = None) -> int:
    """Run the scheduler and return the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        setup_logging()
        log_critical(str(e))
        return 1

    if args.agenda:
        config = config.model_copy(
            update={"agenda": config.agenda.model_copy(update={"path": args.agenda})}
        )

    setup_logging(args.log_level or config.logging.level, config.logging.show_timestamps)

    errors = validate_config(config, require_credentials=not args.dry_run)
    if errors:
        for error in errors:
            log_critical(error)
        return 1

    try:
        summary = asyncio.run(run_once(config, dry_run=args.dry_run))
    except AgendaError as e:
        log_critical(str(e))
        return 1

    if summary.failed:
        log_warning(f"{summary.failed} reminder(s) rejected, {summary.scheduled} scheduled")
    return 0


if __name__ == "__main__":
    sys.exit(main())
