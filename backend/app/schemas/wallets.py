# backend/app/schemas/wallets.py

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


# ──────────────────────────────────────────────────────────────────────────────
# Read Schemas
# ──────────────────────────────────────────────────────────────────────────────

class WalletRead(BaseModel):
    """Response for GET /wallets/{business_id}"""
    business_id: int
    balance: float

    model_config = {"from_attributes": True}


class WalletTransactionRead(BaseModel):
    """Transaction item in history list"""
    id: int
    business_id: int
    booking_id: Optional[int] = None
    amount: float
    type: str  # top_up, commission_deduction, refund, withdrawal
    status: str  # pending, approved, rejected
    reference_id: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ──────────────────────────────────────────────────────────────────────────────
# Operation Request Schemas
# ──────────────────────────────────────────────────────────────────────────────

class WalletRequestCreate(BaseModel):
    """Request body for POST /wallets/{business_id}/requests"""
    amount: float = Field(..., gt=0, description="Amount (must be > 0)")
    type: Literal["top_up", "withdrawal"] = "top_up"
    reference_id: Optional[str] = Field(None, description="Payment reference shown on the receipt")


class WalletVerify(BaseModel):
    """Request body for POST /wallets/transactions/{id}/verify"""
    status: Literal["approved", "rejected"]
    admin_notes: Optional[str] = None
