"""
KPI rollups for the campaign dashboard.

Aggregates budgets, leads, cost per lead, ROI and GRP efficiency over a
filtered campaign set, and shapes chart-ready rows by channel, region,
status and month.
"""

import logging
from dataclasses import asdict
from typing import Dict, List, Optional, Any, Iterable

import pandas as pd

from models.data_models import Campaign, KPIData, channel_supports_metric
from .alert_evaluator import (
    evaluate_grp_efficiency, evaluate_high_cpl_alert, is_grp_underperforming
)
from .status_resolver import migrate_legacy_status

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

KPI_CONFIG = {
    'budget': {'label': 'Total Budget', 'icon': '💰', 'format': 'currency', 'category': 'universal'},
    'leads': {'label': 'Total Leads', 'icon': '👥', 'format': 'number', 'category': 'universal'},
    'cpl': {'label': 'Avg CPL', 'icon': '🎯', 'format': 'currency', 'category': 'universal'},
    'roi': {'label': 'Avg ROI', 'icon': '📈', 'format': 'percentage', 'category': 'universal'},
    'expected_grps': {'label': 'Expected GRPs', 'icon': '📺', 'format': 'number', 'category': 'tv'},
    'achieved_grps': {'label': 'Achieved GRPs', 'icon': '📺', 'format': 'number', 'category': 'tv'},
    'spots_purchased': {'label': 'Spots Purchased', 'icon': '📻', 'format': 'number', 'category': 'traditional'},
    'impressions': {'label': 'Impressions', 'icon': '👁️', 'format': 'number', 'category': 'traditional'},
    'expected_viewers': {'label': 'Expected Viewers', 'icon': '🎬', 'format': 'number', 'category': 'cinema'},
    'expected_views': {'label': 'Expected Views', 'icon': '🖥️', 'format': 'number', 'category': 'dooh'},
}

DEFAULT_KPI_SETS = {
    'digital': ['budget', 'leads', 'cpl', 'roi'],
    'traditional': ['budget', 'spots_purchased', 'expected_grps', 'achieved_grps'],
    'fallback': ['budget', 'leads', 'cpl', 'roi'],
}

# Metric columns summed per channel
METRIC_COLUMNS = [
    'expected_grps', 'achieved_grps', 'spots_purchased',
    'impressions', 'expected_viewers', 'expected_views'
]

CHANNEL_KPI_METRICS = {
    'TV': {'expected_grps': 'expected_grps', 'achieved_grps': 'achieved_grps', 'spots': 'spots_purchased'},
    'Radio': {'spots': 'spots_purchased', 'impressions': 'impressions'},
    'Cinema': {'spots': 'spots_purchased', 'expected_viewers': 'expected_viewers'},
    'DOOH': {'expected_views': 'expected_views'},
}


def campaigns_to_frame(campaigns: Iterable[Campaign]) -> pd.DataFrame:
    """Build a DataFrame with one row per campaign."""
    records = [asdict(c) for c in campaigns]
    if not records:
        return pd.DataFrame(columns=list(Campaign.__dataclass_fields__))

    df = pd.DataFrame.from_records(records)
    numeric = ['budget', 'leads'] + METRIC_COLUMNS
    df[numeric] = df[numeric].apply(pd.to_numeric, errors='coerce').fillna(0)
    return df


def parse_roi(roi: Optional[str]) -> Optional[float]:
    """Parse an ROI label such as "12.5%"; N/A and blanks yield None."""
    if roi is None:
        return None
    text = str(roi).strip()
    if not text or text.upper() == 'N/A':
        return None
    try:
        return float(text.replace('%', ''))
    except ValueError:
        return None


def calculate_kpis(campaigns: List[Campaign]) -> KPIData:
    """
    Compute the dashboard KPI cards for a campaign set.

    Args:
        campaigns: Filtered campaigns

    Returns:
        KPIData rollup
    """
    total_budget = sum(c.budget or 0 for c in campaigns)
    total_leads = sum(c.leads or 0 for c in campaigns)
    avg_cpl = total_budget / total_leads if total_leads > 0 else 0

    extra_social_budget = sum(
        c.extra_social_budget or 0 for c in campaigns if c.is_social
    )

    efficiencies = [
        evaluate_grp_efficiency(c) for c in campaigns if c.channel == 'TV'
    ]
    efficiencies = [e for e in efficiencies if e is not None]
    avg_grp_efficiency = sum(efficiencies) / len(efficiencies) if efficiencies else 1.0

    return KPIData(
        total_budget=total_budget,
        total_leads=total_leads,
        avg_cpl=avg_cpl,
        total_campaigns=len(campaigns),
        extra_social_budget=extra_social_budget,
        grp_shortfall_campaigns=sum(1 for c in campaigns if is_grp_underperforming(c)),
        high_cpl_campaigns=sum(1 for c in campaigns if evaluate_high_cpl_alert(c)),
        avg_grp_efficiency=avg_grp_efficiency
    )


def kpi_value(campaigns: List[Campaign], channel: str, kpi_key: str) -> float:
    """
    Value of a single KPI for one channel.

    Unknown KPI keys and channels without campaigns yield 0.
    """
    channel_campaigns = [c for c in campaigns if c.channel == channel]
    if not channel_campaigns:
        return 0

    if kpi_key == 'budget':
        return sum(c.budget or 0 for c in channel_campaigns)

    elif kpi_key == 'leads':
        return sum(c.leads or 0 for c in channel_campaigns)

    elif kpi_key == 'cpl':
        budget = sum(c.budget or 0 for c in channel_campaigns)
        leads = sum(c.leads or 0 for c in channel_campaigns)
        return budget / leads if leads > 0 else 0

    elif kpi_key == 'roi':
        with_roi = [c for c in channel_campaigns if c.roi and str(c.roi).strip().upper() != 'N/A']
        if not with_roi:
            return 0
        # Unparsable ROI labels count as zero but still weigh in the average
        return sum(parse_roi(c.roi) or 0 for c in with_roi) / len(with_roi)

    elif channel_supports_metric(channel, kpi_key):
        return sum(getattr(c, kpi_key) or 0 for c in channel_campaigns)

    return 0


def get_kpi_config(kpi_key: str) -> Dict[str, str]:
    """Display settings for a KPI key, with a generic fallback."""
    return KPI_CONFIG.get(kpi_key, {
        'label': kpi_key,
        'icon': '📊',
        'format': 'number',
        'category': 'unknown'
    })


def channel_kpi_keys(channel_config: Optional[Dict[str, Any]]) -> List[str]:
    """
    KPI keys shown for a channel, budget always first.

    Uses the channel's configured KPIs, else the default set for its type.
    """
    channel_config = channel_config or {}
    kpis = channel_config.get('visible_kpis') or DEFAULT_KPI_SETS.get(
        channel_config.get('type'), DEFAULT_KPI_SETS['fallback']
    )
    return ['budget'] + [k for k in kpis if k != 'budget']


def channel_kpis(campaigns: List[Campaign], channel: str) -> Dict[str, float]:
    """Budget, leads, campaign count, CPL and channel-specific metric totals."""
    channel_campaigns = [c for c in campaigns if c.channel == channel]

    kpis = {
        'budget': sum(c.budget or 0 for c in channel_campaigns),
        'leads': sum(c.leads or 0 for c in channel_campaigns),
        'campaigns': len(channel_campaigns),
    }
    kpis['cpl'] = kpis['budget'] / kpis['leads'] if kpis['leads'] > 0 else 0

    for key, field_name in CHANNEL_KPI_METRICS.get(channel, {}).items():
        kpis[key] = sum(getattr(c, field_name) or 0 for c in channel_campaigns)

    return kpis


def aggregate_by_channel(campaigns: List[Campaign]) -> Dict[str, Dict[str, float]]:
    """
    Per-channel totals for the channel summary panel.

    TV channels also get the mean GRP efficiency of campaigns that have one.
    """
    df = campaigns_to_frame(campaigns)
    if df.empty:
        return {}

    grouped = df.groupby('channel', sort=False)

    totals = grouped.agg(
        budget=('budget', 'sum'),
        leads=('leads', 'sum'),
        campaigns=('budget', 'size'),
        spots=('spots_purchased', 'sum'),
        impressions=('impressions', 'sum'),
        expected_views=('expected_views', 'sum'),
    )

    result = {}
    for channel, row in totals.iterrows():
        result[channel] = {key: float(value) for key, value in row.items()}
        result[channel]['campaigns'] = int(row['campaigns'])

    efficiencies: Dict[str, List[float]] = {}
    for campaign in campaigns:
        if campaign.channel != 'TV':
            continue
        efficiency = evaluate_grp_efficiency(campaign)
        if efficiency is not None:
            efficiencies.setdefault(campaign.channel, []).append(efficiency)

    for channel, values in efficiencies.items():
        result[channel]['grp_efficiency'] = sum(values) / len(values)

    return result


def aggregate_by_region(campaigns: List[Campaign]) -> List[Dict[str, Any]]:
    """Budget per region split by channel, one row per region."""
    df = campaigns_to_frame(campaigns)
    if df.empty:
        return []

    totals = df.groupby(['region', 'channel'], sort=False)['budget'].sum()

    rows: Dict[str, Dict[str, Any]] = {}
    for (region, channel), budget in totals.items():
        rows.setdefault(region, {'name': region})[channel] = float(budget)
    return list(rows.values())


def aggregate_by_status(campaigns: List[Campaign]) -> List[Dict[str, Any]]:
    """Campaign count per migrated status."""
    counts: Dict[str, int] = {}
    for campaign in campaigns:
        status = migrate_legacy_status(campaign.status).value
        counts[status] = counts.get(status, 0) + 1
    return [{'name': status, 'value': count} for status, count in counts.items()]


def aggregate_monthly_spend(campaigns: List[Campaign]) -> List[Dict[str, Any]]:
    """
    Budget per start month split by channel, in chronological order.

    Campaigns without a start date are left out.
    """
    df = campaigns_to_frame(campaigns)
    if df.empty:
        return []

    df['start'] = pd.to_datetime(df['start_date'], errors='coerce')
    df = df.dropna(subset=['start'])
    if df.empty:
        return []

    df['month'] = df['start'].dt.to_period('M')
    totals = df.groupby(['month', 'channel'])['budget'].sum()

    rows: Dict[Any, Dict[str, Any]] = {}
    for (month, channel), budget in totals.items():
        rows.setdefault(month, {'name': month.strftime('%b %Y')})[channel] = float(budget)
    return [rows[month] for month in sorted(rows)]


def analyze_grp_performance(campaigns: List[Campaign]) -> List[Dict[str, Any]]:
    """
    GRP efficiency rows for TV campaigns, best first.

    The performance gap is only reported for underperforming campaigns.
    """
    rows = []
    for campaign in campaigns:
        if campaign.channel != 'TV':
            continue
        efficiency = evaluate_grp_efficiency(campaign)
        if efficiency is None:
            continue

        underperforming = is_grp_underperforming(campaign)
        gap = 0.0
        if underperforming:
            gap = (campaign.expected_grps - campaign.achieved_grps) / campaign.expected_grps * 100

        rows.append({
            'name': campaign.brand,
            'efficiency': efficiency,
            'expected_grps': campaign.expected_grps,
            'achieved_grps': campaign.achieved_grps,
            'is_underperforming': underperforming,
            'performance_gap': gap,
        })

    rows.sort(key=lambda row: row['efficiency'], reverse=True)
    logger.info(f"Analyzed GRP performance for {len(rows)} TV campaigns")
    return rows
