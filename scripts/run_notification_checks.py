"""Run the notification rules and booking reminders once, for cron."""

from __future__ import annotations

import argparse
import logging

from crm_notifications.application.use_cases.bookings import send_booking_reminders
from crm_notifications.application.use_cases.notifications import (
    RuleConfig,
    run_notification_checks,
)
from crm_notifications.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--skip-bookings",
        action="store_true",
        help="Ne pas envoyer les rappels de rendez-vous",
    )
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args()
    initialize_database()
    config = RuleConfig.from_settings()

    session = SessionLocal()
    try:
        summary = run_notification_checks(session, config=config)
        for result in summary.rules:
            print(
                f"{result.rule}: {result.status} "
                f"(created={result.created}, skipped={result.skipped}, failed={result.failed})"
            )
        if not args.skip_bookings:
            run = send_booking_reminders(session, lead=config.booking_reminder_lead)
            print(f"bookings: {run.sent}/{run.total_processed} reminders sent")
    finally:
        session.close()

    if summary.total_failure:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
