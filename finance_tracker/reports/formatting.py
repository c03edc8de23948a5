"""
Display helpers shared by the report modules.

Everything user-facing is pt-BR: "R$ 1.234,56", "Março", "dd/mm/yyyy".
Months are 0-indexed.
"""

from datetime import datetime


MONTH_NAMES = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)

MONTH_LABELS = (
    "JAN", "FEV", "MAR", "ABR", "MAI", "JUN",
    "JUL", "AGO", "SET", "OUT", "NOV", "DEZ",
)

# Sunday first, matching DayOfWeekStat.day
DAY_NAMES = ("Dom", "Seg", "Ter", "Qua", "Qui", "Sex", "Sáb")


def format_amount(value: float) -> str:
    """1234.5 -> '1.234,50'"""
    text = f"{value:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value: float) -> str:
    """1234.5 -> 'R$ 1.234,50'"""
    return f"R$ {format_amount(value)}"


def format_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def month_name(month: int) -> str:
    return MONTH_NAMES[month]


def month_label(month: int) -> str:
    return MONTH_LABELS[month]


def sunday_first_weekday(value: datetime) -> int:
    """0 = Sunday .. 6 = Saturday (datetime.weekday() starts on Monday)."""
    return (value.weekday() + 1) % 7
