"""Command line interface for fee-reminder.

Usage::

    fee-reminder seed --households 20 --seed 42
    fee-reminder process --date 2025-08-22
    fee-reminder stats
    fee-reminder journal --limit 10
    fee-reminder rules set --preventive -7 --overdue-level-2 10
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from datetime import date
from decimal import Decimal

from fee_reminder.config import FeeReminderConfig
from fee_reminder.exceptions import FeeReminderError
from fee_reminder.logging import get_logger, setup_logging
from fee_reminder.scenarios import SchoolYearScenario
from fee_reminder.service import ReminderService
from fee_reminder.store.serialization import serialize_value

logger = get_logger(__name__)


def _date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from e


def _print_json(data: object) -> None:
    print(json.dumps(serialize_value(data), indent=2, ensure_ascii=False))


def cmd_seed(service: ReminderService, args: argparse.Namespace) -> int:
    scenario = SchoolYearScenario(
        num_households=args.households,
        school_year=args.school_year,
        annual_fee=Decimal(args.annual_fee),
        installments=args.installments,
        first_due_date=args.first_due_date,
        seed=args.seed,
    )
    scenario.generate(service.store, args.date or service.clock().date())
    _print_json(service.store.summary())
    return 0


def cmd_process(service: ReminderService, args: argparse.Namespace) -> int:
    report = service.process_reminders(args.date)
    _print_json(
        {
            "date": report.today,
            "examined": report.examined,
            "processed": report.processed,
            "skipped": report.skipped,
            "skipped_duplicates": report.skipped_duplicates,
            "skipped_missing": report.skipped_missing,
            "by_level": report.counts_by_level(),
        }
    )
    return 0


def cmd_stats(service: ReminderService, args: argparse.Namespace) -> int:
    _print_json(service.stats(args.date).to_dict())
    return 0


def cmd_journal(service: ReminderService, args: argparse.Namespace) -> int:
    _print_json(service.journal_records(args.limit))
    return 0


def cmd_rules(service: ReminderService, args: argparse.Namespace) -> int:
    rules = service.rules()
    if args.rules_command == "set":
        changes = {
            name: getattr(args, name)
            for name in ("preventive", "overdue_level_1", "overdue_level_2")
            if getattr(args, name) is not None
        }
        rules = service.update_rules(replace(rules, **changes))
    _print_json(rules.to_dict())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fee-reminder",
        description="Tuition fee ledger and automatic payment reminders.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    seed = sub.add_parser("seed", help="Populate the store with sample data")
    seed.add_argument("--households", type=int, default=20)
    seed.add_argument("--school-year", default="2025-2026")
    seed.add_argument("--annual-fee", default="900.00")
    seed.add_argument("--installments", type=int, default=3)
    seed.add_argument("--first-due-date", type=_date, default=date(2025, 9, 1))
    seed.add_argument("--date", type=_date, default=None, help="Pay installments due before this day")
    seed.add_argument("--seed", type=int, default=None)
    seed.set_defaults(handler=cmd_seed)

    process = sub.add_parser("process", help="Issue the reminders due on a day")
    process.add_argument("--date", type=_date, default=None, help="Day to process (default: today)")
    process.set_defaults(handler=cmd_process)

    stats = sub.add_parser("stats", help="Show ledger and reminder statistics")
    stats.add_argument("--date", type=_date, default=None)
    stats.set_defaults(handler=cmd_stats)

    journal = sub.add_parser("journal", help="List issued reminders, newest first")
    journal.add_argument("--limit", type=int, default=None)
    journal.set_defaults(handler=cmd_journal)

    rules = sub.add_parser("rules", help="Show or change reminder offsets")
    rules_sub = rules.add_subparsers(dest="rules_command", required=True)
    rules_sub.add_parser("show")
    rules_set = rules_sub.add_parser("set")
    rules_set.add_argument("--preventive", type=int, default=None, help="Days before due date (negative)")
    rules_set.add_argument("--overdue-level-1", type=int, default=None)
    rules_set.add_argument("--overdue-level-2", type=int, default=None)
    rules.set_defaults(handler=cmd_rules)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = FeeReminderConfig.from_env()
        setup_logging(args.log_level or config.log_level, config.log_format)
        service = ReminderService.from_config(config)
    except FeeReminderError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1

    try:
        return args.handler(service, args)
    except FeeReminderError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    finally:
        # Flush and close
        service.close()


if __name__ == "__main__":
    sys.exit(main())
