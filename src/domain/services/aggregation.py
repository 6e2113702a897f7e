"""Balance aggregation over live assets and liabilities."""

from collections.abc import Iterable
from decimal import Decimal

from src.domain.models import Asset, Liability, NetWorthSummary
from src.utils.decimal_utils import coerce_decimal


def aggregate(
    assets: Iterable[Asset],
    liabilities: Iterable[Liability],
) -> NetWorthSummary:
    """Compute total assets, total liabilities, and net worth.

    Values are summed as-is: a negative asset value (possible after an
    overdrawing expense) lowers the total instead of being clamped.

    Args:
        assets: Live assets of one user.
        liabilities: Live liabilities of one user.

    Returns:
        NetWorthSummary: Totals and their difference.
    """
    total_assets = sum(
        (coerce_decimal(asset.current_value) for asset in assets),
        Decimal("0"),
    )
    total_liabilities = sum(
        (coerce_decimal(item.current_balance) for item in liabilities),
        Decimal("0"),
    )
    return NetWorthSummary(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
    )


__all__ = ["aggregate"]
