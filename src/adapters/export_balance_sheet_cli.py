"""CLI adapter exporting a user's balance sheet to CSV."""

import os
from pathlib import Path

from src.infrastructure.container import build_export_use_case
from src.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)
from src.utils.utils import get_project_root


def _export_dir() -> Path:
    raw_dir = os.getenv("EXPORT_DIR")
    if raw_dir:
        return Path(raw_dir).expanduser().resolve()
    return get_project_root() / "data" / "exports"


def main() -> None:
    """Write BALANCE_USER_ID's balance sheet into EXPORT_DIR."""
    logger = get_app_logger()
    user_id = os.getenv("BALANCE_USER_ID")
    if not user_id:
        logger.warning(
            "BALANCE_USER_ID is required to export a balance sheet."
        )
        return
    directory = _export_dir()
    get_usage_logger().info(
        f"export_balance_sheet_cli user={user_id} dir={directory}"
    )

    result = build_export_use_case().execute(user_id, directory)
    if not result.success:
        logger.error(result.error)
        print(result.error)
        return
    print(f"Balance sheet exported to {result.data}")


if __name__ == "__main__":  # pragma: no cover
    main()
