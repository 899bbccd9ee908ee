"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime
from decimal import Decimal

SplitType = Literal["equal", "percentage", "custom", "none"]
ShareType = Literal["equal", "percentage", "amount"]
ExpenseCategory = Literal["food", "transport", "accommodation", "activity", "other"]


def _normalize_currency(v: str) -> str:
    value = (v or "").strip().upper()
    if len(value) != 3 or not value.isalpha():
        raise ValueError("currency must be a three-letter ISO 4217 code")
    return value


class ParticipantShare(BaseModel):
    """A participant's portion of an expense, in the expense currency."""
    user_id: str
    user_name: str = ""
    share_amount: int  # Minor units
    share_type: ShareType
    share_value: Optional[Decimal] = None  # Percentage or custom amount as entered

    class Config:
        from_attributes = True


class ExpenseRecord(BaseModel):
    """A stored expense with its materialized shares, as consumed by the ledger."""
    id: str
    amount: int  # Minor units, always positive
    currency: str
    payer_id: str
    payer_name: str = ""
    fx_rate: Optional[Decimal] = None  # Base currency per 1 unit of `currency`
    participants: List[ParticipantShare] = []


class ConversionResult(BaseModel):
    """Result of converting one expense into the base currency."""
    amount: int  # Base currency minor units; 0 when needs_fx_rate
    currency: str
    needs_fx_rate: bool


class CustomSplit(BaseModel):
    """Fixed amount owed by one named participant."""
    name: str
    amount: int = Field(ge=0)


class PercentageSplit(BaseModel):
    """Percentage of the total owed by one named participant."""
    name: str
    percentage: Decimal = Field(ge=0, le=100)


class SplitInput(BaseModel):
    """How an expense total should be divided."""
    amount: int = Field(gt=0)  # Minor units
    split_type: SplitType = "equal"
    split_count: Optional[int] = Field(default=None, gt=0)
    participants: Optional[List[str]] = None  # Names or user ids
    custom_splits: Optional[List[CustomSplit]] = None
    percentage_splits: Optional[List[PercentageSplit]] = None


class ExpenseParticipantRecord(BaseModel):
    """A share row ready to be persisted."""
    expense_id: str
    user_id: str
    share_amount: int
    share_type: ShareType
    share_value: Optional[Decimal] = None


class SplitResult(BaseModel):
    """Output of the split calculator; `error` set means no shares were produced."""
    participants: List[ExpenseParticipantRecord] = []
    error: Optional[str] = None


class ExpenseCreate(SplitInput):
    """Schema for expense creation."""
    currency: str = "EUR"
    description: str = ""
    category: ExpenseCategory = "other"
    payer: Optional[str] = None  # Name or user id; defaults to the creator
    created_by: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return _normalize_currency(v)


class ExpenseParticipantResponse(BaseModel):
    """Schema for expense participant response."""
    user_id: str
    user_name: str
    share_amount: int
    share_type: str
    share_value: Optional[Decimal] = None


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: str
    trip_id: str
    payer_id: str
    payer_name: str
    date: datetime
    amount: int
    currency: str
    fx_rate: Optional[Decimal] = None
    base_currency: str  # Trip's base currency
    description: Optional[str] = None
    category: str
    split_type: str
    participants: List[ExpenseParticipantResponse] = []
    created_at: datetime
