"""Session-scoped in-memory mirror of one user's balance sheet."""

import threading

from src.application.ports.ledger_store import (
    ASSETS_TABLE,
    LIABILITIES_TABLE,
    LedgerStorePort,
)
from src.domain.models import Asset, Liability, NetWorthSummary
from src.domain.services.aggregation import aggregate


class BalanceSheetState:
    """Assets and liabilities owned by one authenticated session.

    The facade and the auto-update reactor share one instance. Mutations
    happen while holding ``lock``; totals are always derived from the
    current collections.
    """

    def __init__(self, user_id: str | None = None) -> None:
        self.user_id = user_id
        self.assets: list[Asset] = []
        self.liabilities: list[Liability] = []
        self.loading = False
        self.error: str | None = None
        self.lock = threading.RLock()

    @property
    def totals(self) -> NetWorthSummary:
        return aggregate(self.assets, self.liabilities)

    def find_asset(self, asset_id: str | None) -> Asset | None:
        if asset_id is None:
            return None
        for asset in self.assets:
            if asset.id == asset_id:
                return asset
        return None

    def add_asset(self, asset: Asset) -> None:
        self.assets = [asset, *self.assets]

    def replace_asset(self, asset: Asset) -> None:
        self.assets = [
            asset if item.id == asset.id else item for item in self.assets
        ]

    def remove_asset(self, asset_id: str) -> None:
        self.assets = [item for item in self.assets if item.id != asset_id]

    def find_liability(self, liability_id: str | None) -> Liability | None:
        if liability_id is None:
            return None
        for liability in self.liabilities:
            if liability.id == liability_id:
                return liability
        return None

    def add_liability(self, liability: Liability) -> None:
        self.liabilities = [liability, *self.liabilities]

    def replace_liability(self, liability: Liability) -> None:
        self.liabilities = [
            liability if item.id == liability.id else item
            for item in self.liabilities
        ]

    def remove_liability(self, liability_id: str) -> None:
        self.liabilities = [
            item for item in self.liabilities if item.id != liability_id
        ]

    def reload(self, store: LedgerStorePort) -> None:
        """Replace both collections with the store's current rows.

        Both tables are read before anything is replaced, so a failing read
        leaves the previous collections untouched.

        Raises:
            LedgerStoreError: If either read fails.
        """
        if self.user_id is None:
            self.clear()
            return
        asset_rows = store.select_by_user(
            ASSETS_TABLE,
            self.user_id,
            order_by="created_at",
            descending=True,
        )
        liability_rows = store.select_by_user(
            LIABILITIES_TABLE,
            self.user_id,
            order_by="created_at",
            descending=True,
        )
        self.assets = [Asset.from_row(row) for row in asset_rows]
        self.liabilities = [Liability.from_row(row) for row in liability_rows]

    def clear(self) -> None:
        self.assets = []
        self.liabilities = []
        self.error = None
        self.loading = False


__all__ = ["BalanceSheetState"]
