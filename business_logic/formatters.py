"""
Budget and metric formatting for dashboard labels and alert messages.

Amounts use Italian digit grouping; the currency symbol follows the
DEFAULT_CURRENCY setting unless a currency code is passed explicitly.
"""

from typing import Optional

from config.settings import config_manager

CURRENCY_SYMBOLS = {
    'EUR': '€',
    'USD': '$',
    'GBP': '£',
}


def currency_symbol(currency: Optional[str] = None) -> str:
    """Symbol for a currency code; unknown codes are shown as the code itself."""
    code = (currency or config_manager.load_config().default_currency).upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def _format_grouped(value: float) -> str:
    """Format a number with Italian grouping (1.234,5) and up to 3 decimals."""
    text = f"{value:,.3f}".rstrip('0').rstrip('.')
    return text.replace(',', '_').replace('.', ',').replace('_', '.')


def format_budget(value: float, currency: Optional[str] = None) -> str:
    """Format a budget, adapting to its magnitude."""
    symbol = currency_symbol(currency)
    if value >= 1_000_000:
        return f"{symbol}{value / 1_000_000:.2f}M"
    if value >= 100_000:
        return f"{symbol}{value / 1_000:.1f}k"
    return f"{symbol}{_format_grouped(value)}"


def format_budget_compact(value: float, currency: Optional[str] = None) -> str:
    """Short budget label for chart axes."""
    symbol = currency_symbol(currency)
    if value >= 1_000_000:
        return f"{symbol}{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{symbol}{round(value / 1_000)}k"
    return f"{symbol}{_format_grouped(value)}"


def format_budget_detailed(value: float, currency: Optional[str] = None) -> str:
    """Budget label with the full amount in brackets, for tooltips."""
    symbol = currency_symbol(currency)
    if value >= 1_000_000:
        return f"{symbol}{value / 1_000_000:.2f}M ({_format_grouped(value)})"
    if value >= 100_000:
        return f"{symbol}{round(value / 1_000)}k ({_format_grouped(value)})"
    return f"{symbol}{_format_grouped(value)}"


def format_metric(value: Optional[float], unit: Optional[str] = None) -> str:
    """Format a channel metric with K/M suffixes; empty values show a dash."""
    if not value:
        return '—'

    suffix = f" {unit}" if unit else ''
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M{suffix}"
    elif value >= 1_000:
        return f"{value / 1_000:.1f}K{suffix}"
    return f"{value:,}{suffix}"


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def format_kpi_value(value: float, fmt: str, currency: Optional[str] = None) -> str:
    """Format a KPI value according to its configured display format."""
    if fmt == 'currency':
        return format_budget(value, currency)
    elif fmt == 'percentage':
        return format_percentage(value)
    elif fmt == 'number':
        return format_metric(value) if value else '0'
    return str(value)
