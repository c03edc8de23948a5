"""
Invoice Period Resolution

A credit purchase is billed on the invoice that closes on the card's due
day. Purchases made on or after the due day of month M go to the invoice
of month M+1; purchases before it go to the invoice of month M. The
billing window of invoice M is therefore [due_day of M-1, due_day-1 of M].

Day/month/year components are always read in UTC so a purchase late in
the evening never shifts to the next day's invoice.

Everything that is not a credit purchase on a card with a known due day
counts in the calendar month of its own date.
"""

import calendar
from datetime import date, datetime, timezone
from typing import Iterable, Mapping, Optional

import structlog

from finance_tracker.models.finance import CardType, CreditCard, Transaction
from finance_tracker.models.report import CardInvoice, InvoicePeriod
from finance_tracker.reports.formatting import month_name


logger = structlog.get_logger(__name__)


def as_utc(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_invoice_period(transaction_date: datetime, due_day: int) -> InvoicePeriod:
    """
    Invoice (0-indexed month, year) a credit purchase belongs to.

    >>> resolve_invoice_period(datetime(2024, 1, 19), 20)
    InvoicePeriod(month=0, year=2024)
    >>> resolve_invoice_period(datetime(2024, 12, 25), 20)
    InvoicePeriod(month=0, year=2025)
    """
    moment = as_utc(transaction_date)
    month = moment.month - 1

    if moment.day >= due_day:
        if month == 11:
            return InvoicePeriod(month=0, year=moment.year + 1)
        return InvoicePeriod(month=month + 1, year=moment.year)

    return InvoicePeriod(month=month, year=moment.year)


def calendar_period(value: datetime) -> InvoicePeriod:
    """The plain calendar month of a date, as an InvoicePeriod."""
    return InvoicePeriod(month=value.month - 1, year=value.year)


def transaction_period(
    transaction: Transaction,
    cards_by_id: Mapping[str, CreditCard],
) -> InvoicePeriod:
    """
    Month a transaction is counted in.

    Credit purchases follow their card's invoice. A credit purchase whose
    card is unknown or has no due day falls back to its own calendar month.
    """
    if transaction.card_type != CardType.CREDIT:
        return calendar_period(transaction.date)

    card = cards_by_id.get(transaction.card_id) if transaction.card_id else None
    if card is None or card.due_day is None:
        logger.warning(
            "credit_transaction_without_due_day",
            transaction_id=transaction.id,
            card_id=transaction.card_id,
            card_found=card is not None,
        )
        return calendar_period(transaction.date)

    return resolve_invoice_period(transaction.date, card.due_day)


def invoice_due_date(period: InvoicePeriod, due_day: int) -> date:
    """Due date of an invoice, clamped to the last day of short months."""
    last_day = calendar.monthrange(period.year, period.month + 1)[1]
    return date(period.year, period.month + 1, min(due_day, last_day))


def card_uses_invoice(card: CreditCard) -> bool:
    """Only credit cards with a due day bill by invoice period."""
    return card.card_type == CardType.CREDIT and card.due_day is not None


def card_due_date(card: CreditCard, period: InvoicePeriod) -> date:
    """Invoice due date for credit cards; day 1 of the month otherwise."""
    if card_uses_invoice(card):
        return invoice_due_date(period, card.due_day)
    return date(period.year, period.month + 1, 1)


def new_card_invoice(
    card: CreditCard,
    period: InvoicePeriod,
    today: Optional[datetime] = None,
) -> CardInvoice:
    """An empty invoice; unpaid credit invoices past their due date are overdue."""
    today = today or datetime.now(timezone.utc)
    key = period.period_key
    due = card_due_date(card, period)
    is_paid = key in card.paid_months
    return CardInvoice(
        period=key,
        display_month=f"{month_name(period.month)} {period.year}",
        due_date=due,
        is_paid=is_paid,
        is_overdue=card_uses_invoice(card) and not is_paid and due < today.date(),
    )


def group_card_invoices(
    card: CreditCard,
    transactions: Iterable[Transaction],
    today: Optional[datetime] = None,
) -> list[CardInvoice]:
    """
    Every transaction of a card, grouped by the invoice it is billed on.

    Credit cards with a due day use invoice periods; debit cards (and
    credit cards missing a due day) use calendar months due on day 1.
    Newest invoice first.
    """
    uses_invoice = card_uses_invoice(card)
    invoices: dict[str, CardInvoice] = {}

    for transaction in transactions:
        if transaction.card_id != card.id:
            continue

        if uses_invoice:
            period = resolve_invoice_period(transaction.date, card.due_day)
        else:
            period = calendar_period(transaction.date)

        invoice = invoices.get(period.period_key)
        if invoice is None:
            invoice = new_card_invoice(card, period, today)
            invoices[period.period_key] = invoice

        invoice.total_amount += transaction.amount
        invoice.transaction_count += 1
        invoice.transactions.append(transaction)

    return sorted(invoices.values(), key=lambda i: i.period, reverse=True)


def unpaid_total(invoices: Iterable[CardInvoice]) -> float:
    """Sum of every invoice not yet marked paid ("total em aberto")."""
    return sum(i.total_amount for i in invoices if not i.is_paid and i.total_amount > 0)


def open_invoice_period(card: CreditCard, today: Optional[datetime] = None) -> InvoicePeriod:
    """
    The invoice currently accepting purchases.

    Same rule as a purchase made today: on or after the due day the open
    invoice is next month's. Debit cards are always on the current month.
    """
    today = today or datetime.now(timezone.utc)
    if not card_uses_invoice(card):
        return calendar_period(as_utc(today))
    return resolve_invoice_period(today, card.due_day)
