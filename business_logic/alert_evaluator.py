"""
Performance alert evaluation for campaigns.

This module flags extra social budget overruns, TV GRP shortfalls and
high cost-per-lead campaigns, both per campaign (table badges, tooltips)
and across a campaign set (dashboard alert panel).
"""

import logging
from typing import Iterable, List, Optional

from models.data_models import (
    Campaign, BudgetAlert, GRPAlert, CPLAlert, PerformanceAlert,
    BUDGET_ALERT_THRESHOLD, HIGH_CPL_THRESHOLD, GRP_EFFICIENCY_THRESHOLD,
    GRP_GAP_ALERT_PERCENT
)
from .formatters import currency_symbol

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SEVERITY_ORDER = {'high': 3, 'medium': 2, 'low': 1}

# Severity cutoffs
BUDGET_HIGH_SEVERITY = 0.5
CPL_HIGH_SEVERITY = 2 * HIGH_CPL_THRESHOLD
CPL_MEDIUM_SEVERITY = 200
GRP_HIGH_SEVERITY_GAP = 2 * GRP_GAP_ALERT_PERCENT
GRP_MEDIUM_SEVERITY_GAP = GRP_GAP_ALERT_PERCENT


def budget_severity(percentage: float) -> str:
    return 'high' if percentage > BUDGET_HIGH_SEVERITY else 'medium'


def cpl_severity(cost_per_lead: float) -> str:
    if cost_per_lead > CPL_HIGH_SEVERITY:
        return 'high'
    elif cost_per_lead > CPL_MEDIUM_SEVERITY:
        return 'medium'
    return 'low'


def grp_severity(gap_percent: float) -> str:
    if gap_percent > GRP_HIGH_SEVERITY_GAP:
        return 'high'
    elif gap_percent > GRP_MEDIUM_SEVERITY_GAP:
        return 'medium'
    return 'low'


def evaluate_budget_alert(campaign: Campaign) -> Optional[BudgetAlert]:
    """
    Check the extra social budget of a campaign against its main budget.

    Only social channels with a positive extra budget are considered. A zero
    main budget never fires.

    Args:
        campaign: Campaign to check

    Returns:
        BudgetAlert if the extra budget exceeds the threshold share, else None
    """
    if not campaign.is_social:
        return None

    extra = campaign.extra_social_budget or 0
    if extra <= 0 or not campaign.budget or campaign.budget <= 0:
        return None

    percentage = extra / campaign.budget
    if percentage <= BUDGET_ALERT_THRESHOLD:
        return None

    return BudgetAlert(
        campaign_id=campaign.id,
        campaign_name=campaign.display_name,
        channel=campaign.channel,
        percentage=percentage,
        main_budget=campaign.budget,
        extra_budget=extra,
        severity=budget_severity(percentage)
    )


def evaluate_grp_efficiency(campaign: Campaign) -> Optional[float]:
    """
    Achieved over expected GRPs.

    Returns None when either value is missing or nothing was expected, so
    the campaign drops out of averages instead of counting as zero.
    """
    if campaign.expected_grps is None or campaign.achieved_grps is None:
        return None
    if campaign.expected_grps <= 0:
        return None
    return campaign.achieved_grps / campaign.expected_grps


def is_grp_underperforming(campaign: Campaign) -> bool:
    """True for TV campaigns delivering below the GRP efficiency target."""
    if campaign.channel != 'TV':
        return False
    efficiency = evaluate_grp_efficiency(campaign)
    return efficiency is not None and efficiency < GRP_EFFICIENCY_THRESHOLD


def evaluate_grp_alert(campaign: Campaign) -> Optional[GRPAlert]:
    """
    Check a TV campaign for a GRP delivery shortfall.

    Args:
        campaign: Campaign to check

    Returns:
        GRPAlert if the shortfall exceeds the gap threshold, else None
    """
    if campaign.channel != 'TV':
        return None

    efficiency = evaluate_grp_efficiency(campaign)
    if efficiency is None:
        return None

    expected = campaign.expected_grps
    achieved = campaign.achieved_grps
    if achieved >= expected:
        return None

    gap = (expected - achieved) / expected * 100
    if gap <= GRP_GAP_ALERT_PERCENT:
        return None

    return GRPAlert(
        campaign_id=campaign.id,
        campaign_name=campaign.display_name,
        expected_grps=expected,
        achieved_grps=achieved,
        performance_gap_percent=gap,
        efficiency=efficiency
    )


def evaluate_high_cpl_alert(campaign: Campaign) -> bool:
    """True if the campaign cost per lead is above the alert threshold."""
    return campaign.cost_per_lead is not None and campaign.cost_per_lead > HIGH_CPL_THRESHOLD


def evaluate_cpl_alert(campaign: Campaign) -> Optional[CPLAlert]:
    """Build the tooltip payload for a high cost-per-lead campaign."""
    if not evaluate_high_cpl_alert(campaign):
        return None
    return CPLAlert(
        campaign_id=campaign.id,
        campaign_name=campaign.display_name,
        channel=campaign.channel,
        cost_per_lead=campaign.cost_per_lead,
        leads=campaign.leads,
        budget=campaign.budget
    )


def _sort_by_severity(alerts: List[PerformanceAlert]) -> List[PerformanceAlert]:
    return sorted(alerts, key=lambda alert: SEVERITY_ORDER[alert.severity], reverse=True)


def detect_performance_alerts(campaigns: Iterable[Campaign]) -> List[PerformanceAlert]:
    """
    Collect GRP and cost-per-lead alerts for a campaign set.

    Budget alerts are reported by detect_budget_alerts. The result is
    ordered high severity first, keeping campaign order within a severity.

    Args:
        campaigns: Filtered campaigns shown on the dashboard

    Returns:
        List of PerformanceAlert
    """
    alerts = []

    for campaign in campaigns:
        if is_grp_underperforming(campaign):
            efficiency = evaluate_grp_efficiency(campaign)
            gap = (campaign.expected_grps - campaign.achieved_grps) / campaign.expected_grps * 100
            alerts.append(PerformanceAlert(
                type='grp',
                campaign_id=campaign.id,
                campaign_name=campaign.display_name,
                channel=campaign.channel,
                severity=grp_severity(gap),
                message=f"GRP performance {gap:.1f}% below target",
                value=efficiency,
                threshold=GRP_EFFICIENCY_THRESHOLD
            ))

        if evaluate_high_cpl_alert(campaign):
            alerts.append(PerformanceAlert(
                type='cpl',
                campaign_id=campaign.id,
                campaign_name=campaign.display_name,
                channel=campaign.channel,
                severity=cpl_severity(campaign.cost_per_lead),
                message=f"High CPL: {currency_symbol()}{campaign.cost_per_lead:.2f}",
                value=campaign.cost_per_lead,
                threshold=HIGH_CPL_THRESHOLD
            ))

    logger.info(f"Detected {len(alerts)} performance alerts")
    return _sort_by_severity(alerts)


def detect_budget_alerts(campaigns: Iterable[Campaign]) -> List[PerformanceAlert]:
    """Collect extra social budget alerts for a campaign set, high severity first."""
    alerts = []

    for campaign in campaigns:
        budget_alert = evaluate_budget_alert(campaign)
        if budget_alert is None:
            continue
        alerts.append(PerformanceAlert(
            type='budget',
            campaign_id=campaign.id,
            campaign_name=budget_alert.campaign_name,
            channel=campaign.channel,
            severity=budget_alert.severity,
            message=f"Extra social budget {budget_alert.percentage * 100:.1f}% of main budget",
            value=budget_alert.percentage,
            threshold=BUDGET_ALERT_THRESHOLD
        ))

    return _sort_by_severity(alerts)
