"""CLI adapter recording a balance snapshot for one user."""

from datetime import date
import os

from src.infrastructure.container import build_snapshot_manager
from src.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


def _parse_date(value: str | None, logger) -> date | None:
    """Parse an ISO date string into a date.

    Args:
        value: Date string in YYYY-MM-DD format.
        logger: Logger used for warnings.

    Returns:
        date | None: Parsed date or None when invalid.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        )
        return None


def main() -> None:
    """Snapshot the live totals of BALANCE_USER_ID."""
    logger = get_app_logger()
    user_id = os.getenv("BALANCE_USER_ID")
    if not user_id:
        logger.warning("BALANCE_USER_ID is required to create a snapshot.")
        return
    snapshot_date = _parse_date(os.getenv("SNAPSHOT_DATE"), logger)
    get_usage_logger().info(
        f"snapshot_cli user={user_id} date={snapshot_date}"
    )

    manager = build_snapshot_manager()
    result = manager.create_snapshot(user_id, snapshot_date)
    if not result.success:
        logger.error(result.error)
        print(result.error)
        return

    snapshot = result.data
    print(
        f"Snapshot {snapshot.snapshot_date}: "
        f"assets={snapshot.total_assets}, "
        f"liabilities={snapshot.total_liabilities}, "
        f"net_worth={snapshot.net_worth}"
    )


if __name__ == "__main__":  # pragma: no cover
    main()
