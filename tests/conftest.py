"""
Shared test fixtures.

Record factories keep each test focused on the fields it cares about.
"""

from datetime import datetime

import pytest

from finance_tracker.models.finance import (
    CardType,
    CreditCard,
    Salary,
    Transaction,
    TransactionType,
)


# Fixed reference time for due-date math
NOW = datetime(2024, 3, 15, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_expense():
    counter = iter(range(1, 10_000))

    def _make(amount: float, when: datetime = datetime(2024, 3, 10), **fields) -> Transaction:
        return Transaction(
            id=fields.pop("id", f"exp-{next(counter)}"),
            description=fields.pop("description", "Despesa"),
            amount=amount,
            type=TransactionType.EXPENSE,
            date=when,
            **fields,
        )

    return _make


@pytest.fixture
def make_income():
    counter = iter(range(1, 10_000))

    def _make(amount: float, when: datetime = datetime(2024, 3, 5), **fields) -> Transaction:
        return Transaction(
            id=fields.pop("id", f"inc-{next(counter)}"),
            description=fields.pop("description", "Receita"),
            amount=amount,
            type=TransactionType.INCOME,
            category=fields.pop("category", "salario"),
            date=when,
            **fields,
        )

    return _make


@pytest.fixture
def credit_card() -> CreditCard:
    return CreditCard(id="card-1", name="Nubank", card_type=CardType.CREDIT, due_day=20)


@pytest.fixture
def debit_card() -> CreditCard:
    return CreditCard(id="card-2", name="Itaú Débito", card_type=CardType.DEBIT, due_day=10)


@pytest.fixture
def salary() -> Salary:
    return Salary(id="sal-1", description="Salário Empresa", company="ACME", amount=5000)
