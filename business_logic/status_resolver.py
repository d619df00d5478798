"""
Campaign status derivation.

Derives the lifecycle status of a campaign from its date range, honours the
manual Scheduled and Cancelled states, migrates legacy status codes, and
computes the updates made by the daily status refresh.

All functions take the reference date explicitly; only the outermost
callers default it to the system clock.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Iterable, List, Optional

from models.data_models import (
    Campaign, Status, StatusUpdate, LEGACY_STATUS_MAP, get_status_config
)
from .error_handler import ErrorSeverity, UnknownStatusError

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CANONICAL_STATUSES = [
    Status.PLANNED,
    Status.SCHEDULED,
    Status.ACTIVE,
    Status.COMPLETED,
    Status.CANCELLED,
]

SCHEDULED_FALLBACK_MESSAGE = (
    'Status changed to "Planned" because valid dates are required for "Scheduled" status.'
)


@dataclass
class StatusNotice:
    """Advisory message shown next to the status selector."""
    severity: ErrorSeverity
    message: str
    dismiss_after: float


@dataclass
class StatusResolution:
    """Outcome of the display status policy."""
    status: Status
    changed: bool
    notice: Optional[StatusNotice] = None


def to_date(value: Any) -> Optional[date]:
    """
    Coerce a date-like value to a calendar date.

    Accepts date, datetime and ISO-8601 strings (any time part is ignored).
    Missing or unparsable values yield None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.debug(f"Ignoring unparsable date value: {text!r}")
        return None


def migrate_legacy_status(raw: Any, strict: bool = False) -> Status:
    """
    Translate a stored status value to the current status set.

    PENDING, LOADED and OK map to PLANNED, SCHEDULED and ACTIVE. Canonical
    values pass through and a missing value means PLANNED.

    Args:
        raw: Stored status value
        strict: Raise on unrecognized values instead of falling back

    Returns:
        Canonical Status

    Raises:
        UnknownStatusError: If strict and the value is not recognized
    """
    if isinstance(raw, Status):
        return raw
    if raw is None or raw == '':
        return Status.PLANNED

    raw = str(raw)
    if raw in LEGACY_STATUS_MAP:
        return LEGACY_STATUS_MAP[raw]

    try:
        return Status(raw)
    except ValueError:
        if strict:
            raise UnknownStatusError(raw)
        logger.warning(f"Unrecognized campaign status {raw!r}, treating as PLANNED")
        return Status.PLANNED


def is_scheduled_eligible(start_date: Any, end_date: Any) -> bool:
    """True if both dates are present and the start is not after the end."""
    start = to_date(start_date)
    end = to_date(end_date)
    return start is not None and end is not None and start <= end


def available_statuses(start_date: Any, end_date: Any) -> List[Status]:
    """Statuses a user may pick manually for the given date range."""
    eligible = is_scheduled_eligible(start_date, end_date)
    return [s for s in CANONICAL_STATUSES if s != Status.SCHEDULED or eligible]


def resolve_auto_status(start_date: Any, end_date: Any, now: Any) -> Status:
    """
    Derive the date-based status of a campaign.

    The reference time and start date are normalized to the start of their
    day and the end date to the end of its day, so the end date is
    inclusive and the time of day never matters.

    Args:
        start_date: Campaign start date
        end_date: Campaign end date
        now: Reference date or datetime

    Returns:
        PLANNED, ACTIVE or COMPLETED

    Raises:
        ValueError: If a date is missing or unparsable
    """
    start = to_date(start_date)
    end = to_date(end_date)
    today = to_date(now)
    if start is None or end is None or today is None:
        raise ValueError("start_date, end_date and now must be valid dates")

    now_at = datetime.combine(today, time.min)
    start_at = datetime.combine(start, time.min)
    end_at = datetime.combine(end, time.max)

    if now_at < start_at:
        return Status.PLANNED
    elif start_at <= now_at <= end_at:
        return Status.ACTIVE
    return Status.COMPLETED


def resolve_display_status(campaign: Campaign, now: Any = None,
                           warning_seconds: float = 5.0,
                           info_seconds: float = 4.0) -> StatusResolution:
    """
    Apply the form status policy to a campaign.

    Cancelled is never reassigned. Scheduled is kept while the dates are
    valid and falls back to Planned otherwise. Any other status follows the
    date-based status, reported only when it differs from the current one.

    Args:
        campaign: Campaign being edited
        now: Reference date, defaults to the system date (also used when
            the value cannot be parsed)
        warning_seconds: Auto-dismiss delay for the Scheduled fallback notice
        info_seconds: Auto-dismiss delay for automatic assignment notices

    Returns:
        StatusResolution with the status to show and an optional notice
    """
    current = migrate_legacy_status(campaign.status)

    if current == Status.CANCELLED:
        return StatusResolution(status=current, changed=False)

    dates_valid = is_scheduled_eligible(campaign.start_date, campaign.end_date)

    if current == Status.SCHEDULED:
        if dates_valid:
            return StatusResolution(status=current, changed=False)
        notice = StatusNotice(
            severity=ErrorSeverity.WARNING,
            message=SCHEDULED_FALLBACK_MESSAGE,
            dismiss_after=warning_seconds,
        )
        return StatusResolution(status=Status.PLANNED, changed=True, notice=notice)

    if not dates_valid:
        return StatusResolution(status=current, changed=False)

    reference = to_date(now)
    if reference is None:
        if now is not None:
            logger.warning(f"Unparsable reference date {now!r}, using today")
        reference = date.today()

    auto_status = resolve_auto_status(campaign.start_date, campaign.end_date, reference)
    if auto_status == current:
        return StatusResolution(status=current, changed=False)

    label = get_status_config(auto_status)['label']
    notice = StatusNotice(
        severity=ErrorSeverity.INFO,
        message=f'Status updated automatically to "{label}" based on selected dates.',
        dismiss_after=info_seconds,
    )
    return StatusResolution(status=auto_status, changed=True, notice=notice)


def refresh_campaign_statuses(campaigns: Iterable[Campaign],
                              today: Optional[date] = None) -> List[StatusUpdate]:
    """
    Compute the status writes of the daily refresh.

    Scheduled campaigns whose start date has been reached become Active;
    Scheduled or Active campaigns whose end date has passed become
    Completed. The caller persists the returned updates.

    Args:
        campaigns: Campaigns to examine
        today: Reference date, defaults to the system date

    Returns:
        One StatusUpdate per campaign whose status changes

    Raises:
        ValueError: If today is given but is not a valid date
    """
    if today is None:
        today = date.today()
    reference = to_date(today)
    if reference is None:
        raise ValueError(f"Invalid reference date for status refresh: {today!r}")
    today = reference

    updates = []
    activated = 0
    completed = 0

    for campaign in campaigns:
        current = migrate_legacy_status(campaign.status)
        start = to_date(campaign.start_date)
        end = to_date(campaign.end_date)
        new_status = current

        if current == Status.SCHEDULED and start is not None and start <= today:
            new_status = Status.ACTIVE

        if current in (Status.SCHEDULED, Status.ACTIVE) and end is not None and end < today:
            new_status = Status.COMPLETED

        if new_status != current:
            updates.append(StatusUpdate(
                campaign_id=campaign.id,
                old_status=current,
                new_status=new_status
            ))
            if new_status == Status.ACTIVE:
                activated += 1
            else:
                completed += 1

    logger.info(f"Campaign statuses refreshed - Active: {activated}, Completed: {completed}")
    return updates
