"""
Core data models for the campaign status and alert engine.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Any


class Status(str, Enum):
    """Campaign lifecycle status."""
    PLANNED = "PLANNED"
    SCHEDULED = "SCHEDULED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Statuses from the previous schema version
LEGACY_STATUS_MAP: Dict[str, Status] = {
    'PENDING': Status.PLANNED,
    'LOADED': Status.SCHEDULED,
    'OK': Status.ACTIVE,
}

STATUS_CONFIG: Dict[Status, Dict[str, str]] = {
    Status.PLANNED: {
        'label': 'Planned',
        'description': 'Campaign is created but not yet started',
        'color': '#6b7280',
        'bg_color': '#f9fafb',
        'text_color': '#374151',
        'icon': '📝',
    },
    Status.SCHEDULED: {
        'label': 'Scheduled',
        'description': 'Dates and data are loaded, ready to launch',
        'color': '#3b82f6',
        'bg_color': '#eff6ff',
        'text_color': '#1d4ed8',
        'icon': '📅',
    },
    Status.ACTIVE: {
        'label': 'Active',
        'description': 'Campaign is currently running',
        'color': '#10b981',
        'bg_color': '#ecfdf5',
        'text_color': '#047857',
        'icon': '🟢',
    },
    Status.COMPLETED: {
        'label': 'Completed',
        'description': 'Campaign has ended successfully',
        'color': '#6b7280',
        'bg_color': '#f3f4f6',
        'text_color': '#4b5563',
        'icon': '✅',
    },
    Status.CANCELLED: {
        'label': 'Cancelled',
        'description': 'Campaign was stopped or deleted',
        'color': '#ef4444',
        'bg_color': '#fef2f2',
        'text_color': '#dc2626',
        'icon': '❌',
    },
}

# Alert thresholds
BUDGET_ALERT_THRESHOLD = 0.30  # extra social budget as a share of main budget
HIGH_CPL_THRESHOLD = 150  # EUR
GRP_EFFICIENCY_THRESHOLD = 0.90
GRP_GAP_ALERT_PERCENT = 10  # percentage points

SOCIAL_CHANNELS = ('Meta', 'TikTok', 'Pinterest')

CHANNEL_METRICS: Dict[str, List[str]] = {
    'TV': ['expected_grps', 'achieved_grps', 'spots_purchased'],
    'Radio': ['spots_purchased', 'impressions'],
    'Cinema': ['spots_purchased', 'expected_viewers'],
    'DOOH': ['expected_views'],
}


def get_status_config(status: Any) -> Dict[str, str]:
    """Get display metadata for a status, falling back to Planned."""
    try:
        return STATUS_CONFIG[Status(status)]
    except ValueError:
        return STATUS_CONFIG[Status.PLANNED]


def channel_supports_metric(channel: str, metric: str) -> bool:
    """Check whether a channel carries a channel-specific metric field."""
    return metric in CHANNEL_METRICS.get(channel, [])


@dataclass
class Campaign:
    """Advertising campaign record as supplied by the persistence layer."""
    channel: str
    brand: str = ''
    region: str = ''
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: float = 0.0
    leads: int = 0
    manager: str = ''
    status: str = Status.PLANNED.value
    id: Optional[str] = None
    period_type: str = 'monthly'
    roi: Optional[str] = None
    cost_per_lead: Optional[float] = None
    notes: Optional[str] = None
    publisher: Optional[str] = None
    extra_social_budget: Optional[float] = None
    extra_social_notes: Optional[str] = None
    # TV
    expected_grps: Optional[float] = None
    achieved_grps: Optional[float] = None
    # TV / Radio / Cinema
    spots_purchased: Optional[int] = None
    # Radio
    impressions: Optional[float] = None
    # Cinema
    expected_viewers: Optional[float] = None
    # DOOH
    expected_views: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.brand} - {self.channel}"

    @property
    def is_social(self) -> bool:
        return self.channel in SOCIAL_CHANNELS


@dataclass
class BudgetAlert:
    """Extra social budget overrun for a single campaign."""
    campaign_id: Optional[str]
    campaign_name: str
    channel: str
    percentage: float
    main_budget: float
    extra_budget: float
    severity: str


@dataclass
class GRPAlert:
    """GRP delivery shortfall for a TV campaign."""
    campaign_id: Optional[str]
    campaign_name: str
    expected_grps: float
    achieved_grps: float
    performance_gap_percent: float
    efficiency: float


@dataclass
class CPLAlert:
    """Cost-per-lead above the alert threshold."""
    campaign_id: Optional[str]
    campaign_name: str
    channel: str
    cost_per_lead: float
    leads: int
    budget: float


@dataclass
class PerformanceAlert:
    """Dashboard-level alert combining all alert types."""
    type: str  # 'grp' | 'cpl' | 'budget'
    campaign_id: Optional[str]
    campaign_name: str
    channel: str
    severity: str  # 'high' | 'medium' | 'low'
    message: str
    value: float
    threshold: float


@dataclass
class KPIData:
    """Portfolio rollup for a filtered campaign set."""
    total_budget: float
    total_leads: int
    avg_cpl: float
    total_campaigns: int
    extra_social_budget: float
    grp_shortfall_campaigns: int
    high_cpl_campaigns: int
    avg_grp_efficiency: float


@dataclass
class StatusUpdate:
    """A status write produced by the daily refresh sweep."""
    campaign_id: Optional[str]
    old_status: Status
    new_status: Status


@dataclass
class DuplicationOverrides:
    """Field overrides applied when duplicating campaigns."""
    start_date: Optional[date]
    end_date: Optional[date]
    manager: Optional[str] = None
    notes: Optional[str] = None
    budget: Optional[float] = None
    region: Optional[str] = None
    brand: Optional[str] = None
    publisher: Optional[str] = None
    set_all_to_planned: bool = False
    custom_status: Optional[Status] = None
