"""
Campaign filtering by status, channel, date range and reporting period.
"""

import calendar
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from models.data_models import Campaign, Status
from .status_resolver import migrate_legacy_status, to_date

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]

QUARTER_MONTHS = {
    'Q1': [1, 2, 3],
    'Q2': [4, 5, 6],
    'Q3': [7, 8, 9],
    'Q4': [10, 11, 12],
}


def quarter_from_month(month: int) -> str:
    """Quarter label for a calendar month (1-12)."""
    return f"Q{(month - 1) // 3 + 1}"


def months_in_quarter(quarter: str) -> List[int]:
    return QUARTER_MONTHS.get(quarter, [])


def generate_period_options(year: int) -> Dict[str, List[Dict[str, Any]]]:
    """Quarter and month choices for the period selector."""
    quarters = [
        {'value': f"{q} {year}", 'label': f"{q} {year}", 'type': 'quarterly'}
        for q in QUARTER_MONTHS
    ]
    months = [
        {
            'value': f"{name} {year}",
            'label': f"{name} {year}",
            'type': 'monthly',
            'month': index + 1,
        }
        for index, name in enumerate(MONTH_NAMES)
    ]
    return {'quarters': quarters, 'months': months}


def period_bounds(period: str, period_type: str) -> Optional[Tuple[date, date]]:
    """
    First and last day of a "March 2025" or "Q1 2025" period.

    Returns None for labels that cannot be parsed.
    """
    try:
        name, year_text = period.split(' ')
        year = int(year_text)
    except ValueError:
        return None

    if period_type == 'monthly':
        if name not in MONTH_NAMES:
            return None
        first_month = last_month = MONTH_NAMES.index(name) + 1
    elif period_type == 'quarterly':
        months = months_in_quarter(name)
        if not months:
            return None
        first_month, last_month = months[0], months[-1]
    else:
        return None

    last_day = calendar.monthrange(year, last_month)[1]
    return date(year, first_month, 1), date(year, last_month, last_day)


def is_campaign_in_date_range(campaign: Campaign, range_start: Any, range_end: Any) -> bool:
    """True if the campaign runs on at least one day of the range."""
    start = to_date(campaign.start_date)
    end = to_date(campaign.end_date)
    if start is None or end is None:
        return False

    range_start = to_date(range_start)
    range_end = to_date(range_end)
    if range_start is not None and end < range_start:
        return False
    if range_end is not None and start > range_end:
        return False
    return True


def is_campaign_in_period(campaign: Campaign, period: str, period_type: str) -> bool:
    """True if the campaign overlaps the given month or quarter."""
    bounds = period_bounds(period, period_type)
    if bounds is None:
        return False
    return is_campaign_in_date_range(campaign, *bounds)


def filter_campaigns(campaigns: Iterable[Campaign],
                     status: Optional[Any] = None,
                     channel: Optional[str] = None,
                     start: Optional[Any] = None,
                     end: Optional[Any] = None) -> List[Campaign]:
    """
    Filter campaigns for dashboard views.

    Statuses are compared after legacy migration. Date bounds select the
    campaigns overlapping the range; omitted filters match everything.
    """
    wanted_status = migrate_legacy_status(status) if status else None
    filtered = []

    for campaign in campaigns:
        if wanted_status is not None and migrate_legacy_status(campaign.status) != wanted_status:
            continue
        if channel and campaign.channel != channel:
            continue
        if (start is not None or end is not None) and not is_campaign_in_date_range(campaign, start, end):
            continue
        filtered.append(campaign)

    return filtered


def statuses_in_use(campaigns: Iterable[Campaign]) -> List[Status]:
    """Distinct migrated statuses, sorted, for the status filter dropdown."""
    return sorted({migrate_legacy_status(c.status) for c in campaigns}, key=lambda s: s.value)
