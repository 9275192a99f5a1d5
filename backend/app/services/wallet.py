# backend/app/services/wallet.py
"""
Business wallet operations outside booking settlement: balance, history,
top-up/withdrawal requests and their admin verification.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..errors import InvalidInputError, NotFoundError
from ..models.generated import WalletTransactions
from ..repositories.catalog import BusinessRepository
from ..repositories.wallets import WalletRepository

logger = logging.getLogger(__name__)

REQUEST_TYPES = ("top_up", "withdrawal")
VERDICTS = ("approved", "rejected")


@dataclass(frozen=True)
class WalletSummary:
    business_id: int
    balance: float


class WalletService:
    def __init__(self, businesses: BusinessRepository, wallets: WalletRepository):
        self.businesses = businesses
        self.wallets = wallets

    @classmethod
    def for_session(cls, db: Session) -> "WalletService":
        return cls(BusinessRepository(db), WalletRepository(db))

    def get_wallet(self, business_id: int) -> WalletSummary:
        balance = self.businesses.get_wallet_balance(business_id)
        if balance is None:
            raise NotFoundError(f"Business {business_id} not found")
        return WalletSummary(business_id=business_id, balance=float(balance))

    def transactions(self, business_id: int, limit: int = 50, offset: int = 0) -> list[WalletTransactions]:
        self.get_wallet(business_id)
        return self.wallets.list_transactions(business_id, limit=limit, offset=offset)

    def pending(self) -> list[WalletTransactions]:
        return self.wallets.list_pending()

    def request(
        self,
        business_id: int,
        amount: float,
        tx_type: str = "top_up",
        reference_id: Optional[str] = None,
    ) -> WalletTransactions:
        if tx_type not in REQUEST_TYPES:
            raise InvalidInputError(f"Unsupported request type: {tx_type!r}")
        if amount <= 0:
            raise InvalidInputError("Amount must be > 0")

        tx = self.wallets.create_request(business_id, amount, tx_type, reference_id)
        logger.info(f"Wallet {tx_type} request {tx.id} for business {business_id}: {amount:.2f}")
        return tx

    def verify(self, transaction_id: int, status: str, admin_notes: Optional[str] = None) -> WalletTransactions:
        if status not in VERDICTS:
            raise InvalidInputError(f"Status must be one of {', '.join(VERDICTS)}")

        tx = self.wallets.verify(transaction_id, status, admin_notes)
        logger.info(
            f"Wallet transaction {transaction_id} ({tx.type}, {float(tx.amount):.2f}) "
            f"{status} for business {tx.business_id}"
        )
        return tx
