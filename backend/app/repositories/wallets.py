# backend/app/repositories/wallets.py
"""
Business wallet ledger.

Every balance change has a wallet_transactions row. Top-ups and withdrawals
are requested as pending and change the balance only when an admin approves
them; approval and the balance change are one transaction.
"""

from typing import Optional

from ..errors import InsufficientWalletBalanceError, InvalidStatusTransitionError, NotFoundError
from ..models.generated import Businesses, WalletTransactions
from .base import BaseRepository


class WalletRepository(BaseRepository[WalletTransactions]):
    model = WalletTransactions

    def list_transactions(
        self,
        business_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> list[WalletTransactions]:
        """Newest first."""
        with self.reading(f"wallet transactions of business {business_id}"):
            return (
                self.db.query(WalletTransactions)
                .filter(WalletTransactions.business_id == business_id)
                .order_by(WalletTransactions.created_at.desc(), WalletTransactions.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )

    def list_pending(self) -> list[WalletTransactions]:
        with self.reading("pending wallet transactions"):
            return (
                self.db.query(WalletTransactions)
                .filter(WalletTransactions.status == "pending")
                .order_by(WalletTransactions.created_at.desc(), WalletTransactions.id.desc())
                .all()
            )

    def create_request(
        self,
        business_id: int,
        amount: float,
        tx_type: str,
        reference_id: Optional[str] = None,
    ) -> WalletTransactions:
        """Record a pending top-up/withdrawal request; balance is untouched."""
        tx = WalletTransactions(
            business_id=business_id,
            amount=amount,
            type=tx_type,
            status="pending",
            reference_id=reference_id,
        )
        with self.transaction():
            if self.db.get(Businesses, business_id) is None:
                raise NotFoundError(f"Business {business_id} not found")
            self.db.add(tx)
        self.db.refresh(tx)
        return tx

    def verify(
        self,
        transaction_id: int,
        status: str,
        admin_notes: Optional[str] = None,
    ) -> WalletTransactions:
        """
        Approve or reject a pending request.

        Approved top-up → credit; approved withdrawal → debit, never below zero.
        """
        with self.transaction():
            tx = self.db.get(WalletTransactions, transaction_id, populate_existing=True)
            if tx is None:
                raise NotFoundError(f"Wallet transaction {transaction_id} not found")

            updated = (
                self.db.query(WalletTransactions)
                .filter(WalletTransactions.id == transaction_id, WalletTransactions.status == "pending")
                .update(
                    {WalletTransactions.status: status, WalletTransactions.admin_notes: admin_notes},
                    synchronize_session=False,
                )
            )
            if not updated:
                raise InvalidStatusTransitionError(
                    transaction_id, tx.status, status, subject="Wallet transaction"
                )

            if status == "approved":
                self._apply(tx)

        self.db.refresh(tx)
        return tx

    def _apply(self, tx: WalletTransactions) -> None:
        amount = abs(float(tx.amount))
        query = self.db.query(Businesses).filter(Businesses.id == tx.business_id)

        if tx.type == "withdrawal":
            changed = query.filter(Businesses.wallet_balance >= amount).update(
                {Businesses.wallet_balance: Businesses.wallet_balance - amount},
                synchronize_session=False,
            )
            if not changed:
                business = self.db.get(Businesses, tx.business_id, populate_existing=True)
                raise InsufficientWalletBalanceError(tx.business_id, business.wallet_balance, amount)
            return

        query.update(
            {Businesses.wallet_balance: Businesses.wallet_balance + amount},
            synchronize_session=False,
        )
