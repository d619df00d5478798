"""
Campaign duplication.

Builds copies of a single campaign, or of every campaign of a brand in a
channel, with new dates and field overrides. The copies are returned to the
caller for persistence; ids and timestamps are cleared.
"""

import logging
from dataclasses import replace
from typing import Any, List, Optional

from models.data_models import Campaign, DuplicationOverrides, Status
from .error_handler import ValidationError
from .status_resolver import resolve_auto_status, to_date

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

COPY_SUFFIX = '(Copy)'


def resolve_duplicate_status(start_date: Any, end_date: Any, now: Any,
                             custom_status: Optional[Status] = None,
                             set_all_to_planned: bool = False) -> Status:
    """
    Status given to a duplicated campaign.

    A custom status wins, then the set-all-to-planned option, then the
    date-based status of the new date range. An unknown custom status
    raises ValidationError.
    """
    if custom_status:
        try:
            return Status(custom_status)
        except ValueError:
            raise ValidationError(f"Invalid status for duplicated campaigns: {custom_status!r}")
    if set_all_to_planned:
        return Status.PLANNED
    return resolve_auto_status(start_date, end_date, now)


def validate_duplicate_dates(start_date: Any, end_date: Any):
    """
    Check the date range of a duplicate.

    Raises:
        ValidationError: If a date is missing or the start is after the end
    """
    start = to_date(start_date)
    end = to_date(end_date)
    if start is None or end is None:
        raise ValidationError("Start and end dates are required.")
    if start > end:
        raise ValidationError("Start date must be before end date.")


def _copy_notes(original: Optional[str], override: Optional[str]) -> str:
    if override:
        return override
    if original:
        return f"{original} {COPY_SUFFIX}"
    return COPY_SUFFIX


def duplicate_campaign(campaign: Campaign, overrides: DuplicationOverrides, now: Any) -> Campaign:
    """
    Build a copy of a campaign with the given overrides.

    Args:
        campaign: Campaign to copy
        overrides: New dates and optional field overrides
        now: Reference date for the date-based status

    Returns:
        New Campaign without id or timestamps

    Raises:
        ValidationError: If the override dates or custom status are invalid
    """
    validate_duplicate_dates(overrides.start_date, overrides.end_date)

    status = resolve_duplicate_status(
        overrides.start_date,
        overrides.end_date,
        now,
        custom_status=overrides.custom_status,
        set_all_to_planned=overrides.set_all_to_planned
    )

    return replace(
        campaign,
        id=None,
        created_at=None,
        updated_at=None,
        start_date=to_date(overrides.start_date),
        end_date=to_date(overrides.end_date),
        manager=overrides.manager or campaign.manager,
        notes=_copy_notes(campaign.notes, overrides.notes),
        budget=overrides.budget if overrides.budget is not None else campaign.budget,
        region=overrides.region or campaign.region,
        brand=overrides.brand or campaign.brand,
        publisher=overrides.publisher or campaign.publisher,
        status=status.value
    )


def duplicate_brand_campaigns(campaigns: List[Campaign], brand: str, channel: str,
                              overrides: DuplicationOverrides, now: Any) -> List[Campaign]:
    """
    Copy every campaign of a brand in a channel.

    Args:
        campaigns: All campaigns
        brand: Brand to duplicate
        channel: Channel to duplicate
        overrides: New dates and optional field overrides
        now: Reference date for the date-based status

    Returns:
        List of new campaigns, in source order

    Raises:
        ValidationError: If no campaign matches or the dates are invalid
    """
    matching = [c for c in campaigns if c.brand == brand and c.channel == channel]
    if not matching:
        raise ValidationError(f'No campaigns found for brand "{brand}" in the {channel} channel')

    logger.info(f"Found {len(matching)} {channel} campaigns for brand \"{brand}\"")

    duplicates = []
    for campaign in matching:
        if campaign.id is None:
            logger.warning(f"Duplicating campaign without id: {campaign.display_name}")
        duplicates.append(duplicate_campaign(campaign, overrides, now))

    logger.info(f"Duplicated {len(duplicates)} campaigns with status {duplicates[0].status}")
    return duplicates
