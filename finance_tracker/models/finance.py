"""
Core Data Models for Finance Tracker

These models define the record shapes the reporting engine consumes.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Salary rows shown inside a month are NOT stored as
transactions. They are synthesized per month by the aggregator and carry
a structured SalaryEntryRef so edit/delete paths never have to parse ids.
The legacy string id (salary_{salaryId}_{year}_{month}) is still derivable
and parseable for callers that only keep the id around.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


SALARY_ENTRY_PREFIX = "salary_"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a money movement."""
    EXPENSE = "expense"
    INCOME = "income"


class CardType(str, Enum):
    """
    Card kind.

    Only CREDIT purchases are moved to an invoice month; DEBIT purchases
    always count in the month they happened.
    """
    CREDIT = "credit"
    DEBIT = "debit"


class SalaryType(str, Enum):
    """Kinds of recurring income definitions."""
    SALARY = "salary"
    THIRTEENTH = "thirteenth"
    VACATION = "vacation"
    BONUS = "bonus"


# =============================================================================
# ENTRY REFERENCES - tagged union for rows shown in a month
# =============================================================================

class TransactionRef(BaseModel):
    """Points at a stored transaction."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["transaction"] = "transaction"
    id: str = Field(..., min_length=1)

    @property
    def entry_id(self) -> str:
        return self.id


class SalaryEntryRef(BaseModel):
    """
    Points at the synthesized salary row of one (salary, year, month).

    month is 0-indexed (0 = January).
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["salary"] = "salary"
    salary_id: str = Field(..., min_length=1)
    year: int
    month: int = Field(..., ge=0, le=11)

    @property
    def entry_id(self) -> str:
        """Legacy pseudo-transaction id."""
        return f"{SALARY_ENTRY_PREFIX}{self.salary_id}_{self.year}_{self.month}"


EntryRef = Annotated[
    Union[TransactionRef, SalaryEntryRef],
    Field(discriminator="kind"),
]


def parse_entry_id(entry_id: str) -> Union[TransactionRef, SalaryEntryRef]:
    """
    Turn a row id back into a reference.

    Salary ids may contain underscores, so year and month are taken from
    the last two segments. Anything that does not parse as a salary row
    is a plain transaction id.
    """
    if entry_id.startswith(SALARY_ENTRY_PREFIX):
        parts = entry_id[len(SALARY_ENTRY_PREFIX):].rsplit("_", 2)
        if len(parts) == 3 and parts[0]:
            salary_id, year, month = parts
            if year.lstrip("-").isdigit() and month.isdigit() and 0 <= int(month) <= 11:
                return SalaryEntryRef(
                    salary_id=salary_id,
                    year=int(year),
                    month=int(month),
                )
    return TransactionRef(id=entry_id)


# =============================================================================
# CORE RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single recorded money movement.

    `date` is the purchase date for expenses and the receipt date for
    income. `due_date` falls back to `date` wherever a due date is needed
    and none was recorded.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    description: str = Field(default="", max_length=500)
    amount: float = Field(
        ...,
        ge=0,
        description="Amount in BRL"
    )
    type: TransactionType
    category: str = Field(default="outros")
    date: datetime
    is_recurring: bool = False
    is_paid: bool = False
    due_date: Optional[datetime] = None
    received_date: Optional[datetime] = Field(
        default=None,
        description="Actual receipt date (income only)"
    )

    # Card attribution
    card_id: Optional[str] = None
    card_name: Optional[str] = None
    card_type: Optional[CardType] = None

    # Recurring chains keep the amount they were created with
    original_amount: Optional[float] = None
    recurrence_id: Optional[str] = None

    # Installment purchases
    installments: Optional[int] = Field(default=None, ge=1)
    installment_number: Optional[int] = Field(default=None, ge=1)
    installment_id: Optional[str] = None

    # Ownership (access control lives in the data source)
    user_id: Optional[str] = None
    group_id: Optional[str] = None
    created_at: Optional[datetime] = None

    # Set only on rows synthesized from a Salary
    is_salary: bool = False
    salary_ref: Optional[SalaryEntryRef] = None

    @field_validator('category', mode='before')
    @classmethod
    def default_blank_category(cls, v):
        """Blank categories fall back to 'outros'."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return "outros"
        return v

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def ref(self) -> Union[TransactionRef, SalaryEntryRef]:
        """Structured reference used by edit/delete paths."""
        if self.salary_ref is not None:
            return self.salary_ref
        return TransactionRef(id=self.id)

    @property
    def amount_changed(self) -> bool:
        """True when a recurring instance was edited away from its original amount."""
        return self.original_amount is not None and self.original_amount != self.amount


class Salary(BaseModel):
    """
    A recurring income definition.

    `payment_date` is kept raw: an ISO date/datetime pins the salary to
    that month only, a bare day-of-month ("5") means every month on that
    day, and no value means every month.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    description: str = Field(default="", max_length=500)
    company: Optional[str] = None
    amount: float = Field(..., ge=0)
    original_amount: Optional[float] = None
    salary_type: SalaryType = SalaryType.SALARY
    is_active: bool = True
    payment_date: Optional[str] = None
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None
    group_id: Optional[str] = None

    @field_validator('payment_date', mode='before')
    @classmethod
    def coerce_payment_date(cls, v):
        """Accept dates and day numbers, store them as text."""
        if v is None:
            return None
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        if isinstance(v, int):
            return str(v)
        if isinstance(v, str) and not v.strip():
            return None
        return v


class SalaryAdjustment(BaseModel):
    """
    One-off override of a salary for a single month.

    At most one adjustment exists per (salary_id, year, month);
    the last one written wins.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    salary_id: str = Field(..., min_length=1)
    year: int
    month: int = Field(..., ge=0, le=11)
    amount: float = Field(..., ge=0)
    description: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.salary_id, self.year, self.month)

    @property
    def adjustment_id(self) -> str:
        """Legacy document id ({salaryId}_{year}_{month})."""
        return f"{self.salary_id}_{self.year}_{self.month}"


class CreditCard(BaseModel):
    """
    A credit or debit card.

    `due_day` is the day each month the invoice closes and becomes due.
    Debit cards may carry one but it is never used.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    card_type: CardType = CardType.CREDIT
    due_day: Optional[int] = Field(default=None, ge=1, le=31)
    paid_months: list[str] = Field(
        default_factory=list,
        description="Invoice periods already paid, as YYYY-MM"
    )
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None
    group_id: Optional[str] = None

    @field_validator('paid_months')
    @classmethod
    def validate_paid_months(cls, v: list[str]) -> list[str]:
        for period in v:
            year, sep, month = period.partition("-")
            if not sep or not year.isdigit() or not month.isdigit() or not 1 <= int(month) <= 12:
                raise ValueError(f"Invalid invoice period: {period}. Expected YYYY-MM")
        return v
