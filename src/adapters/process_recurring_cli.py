"""CLI adapter materializing due recurring transactions.

Meant to run from a daily scheduler such as cron. Inserted transactions land
in the transactions table like any other; sessions in other processes with
auto-update enabled pick them up on their next insert poll.
"""

from datetime import date
import os

from src.infrastructure.container import build_recurring_scheduler
from src.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


def main() -> None:
    """Insert every recurring occurrence due for BALANCE_USER_ID."""
    logger = get_app_logger()
    user_id = os.getenv("BALANCE_USER_ID")
    if not user_id:
        logger.warning(
            "BALANCE_USER_ID is required to process recurring transactions."
        )
        return
    raw_as_of = os.getenv("RECURRING_AS_OF")
    as_of = None
    if raw_as_of:
        try:
            as_of = date.fromisoformat(raw_as_of)
        except ValueError:
            logger.warning(
                f"Invalid date '{raw_as_of}'. Expected format YYYY-MM-DD."
            )
            return

    get_usage_logger().info(
        f"process_recurring_cli user={user_id} as_of={as_of}"
    )
    scheduler = build_recurring_scheduler()
    created = scheduler.materialize_due_transactions(user_id, as_of)
    print(f"Created {len(created)} recurring transactions.")
    for transaction in created:
        print(
            f"  {transaction.transaction_date} {transaction.transaction_type} "
            f"{transaction.amount} {transaction.category or ''}".rstrip()
        )


if __name__ == "__main__":  # pragma: no cover
    main()
