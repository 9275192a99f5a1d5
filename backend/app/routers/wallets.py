# backend/app/routers/wallets.py
"""
Business wallet API.

Balance changes only through wallet_transactions: booking commission/refund
rows written by the settlement engine, and top-up/withdrawal requests that
an admin verifies here.
"""

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_wallet_service
from ..schemas.wallets import (
    WalletRead,
    WalletRequestCreate,
    WalletTransactionRead,
    WalletVerify,
)
from ..services.wallet import WalletService

router = APIRouter(prefix="/wallets", tags=["wallets"])


@router.get("/transactions/pending", response_model=list[WalletTransactionRead])
def list_pending(wallets: WalletService = Depends(get_wallet_service)):
    """Requests awaiting admin verification, newest first."""
    return wallets.pending()


@router.post("/transactions/{id}/verify", response_model=WalletTransactionRead)
def verify_transaction(
    id: int,
    data: WalletVerify,
    wallets: WalletService = Depends(get_wallet_service),
):
    return wallets.verify(id, data.status, data.admin_notes)


@router.get("/{business_id}", response_model=WalletRead)
def get_wallet(business_id: int, wallets: WalletService = Depends(get_wallet_service)):
    return wallets.get_wallet(business_id)


@router.get("/{business_id}/transactions", response_model=list[WalletTransactionRead])
def list_transactions(
    business_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    wallets: WalletService = Depends(get_wallet_service),
):
    return wallets.transactions(business_id, limit=limit, offset=offset)


@router.post(
    "/{business_id}/requests",
    response_model=WalletTransactionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_request(
    business_id: int,
    data: WalletRequestCreate,
    wallets: WalletService = Depends(get_wallet_service),
):
    """Top-up or withdrawal request; balance changes on approval."""
    return wallets.request(business_id, data.amount, data.type, data.reference_id)
