"""
Centralized campaign data access for dashboard views.
"""

import logging
import os
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Any, Tuple
from dataclasses import dataclass
import hashlib

from config.settings import AppConfig, config_manager
from models.data_models import Campaign, StatusUpdate
from business_logic.alert_evaluator import detect_budget_alerts, detect_performance_alerts
from business_logic.campaign_filters import filter_campaigns, statuses_in_use
from business_logic.error_handler import error_handler
from business_logic.kpi_calculator import calculate_kpis
from business_logic.status_resolver import (
    StatusResolution, refresh_campaign_statuses, resolve_display_status
)
from .parsers import CampaignFileParser, CampaignRecordParser

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class DataCacheEntry:
    """Represents a cached campaign export with metadata."""
    campaigns: List[Campaign]
    file_path: str
    file_hash: str
    last_updated: datetime
    last_accessed: datetime


class CampaignDataManager:
    """
    Centralized campaign access and dashboard summaries.

    Loads campaign exports with caching, feeds them through the status,
    alert and KPI rules, and reports ingestion problems through the
    error handler.
    """

    def __init__(self, data_path: Optional[str] = None,
                 cache_ttl_hours: Optional[int] = None,
                 config: Optional[AppConfig] = None):
        """
        Initialize the CampaignDataManager.

        Args:
            data_path: Campaign export path, defaults to the configured one
            cache_ttl_hours: Time-to-live for cached data in hours
            config: Application settings, defaults to the global configuration
        """
        self.config = config or config_manager.load_config()
        self.default_data_path = data_path or self.config.campaign_data_path
        if cache_ttl_hours is None:
            cache_ttl_hours = self.config.cache_timeout_hours
        self.cache_ttl = timedelta(hours=cache_ttl_hours)

        self._cache: Optional[DataCacheEntry] = None
        self.last_issues: List[Dict[str, Any]] = []

    def _get_file_hash(self, file_path: str) -> str:
        """
        Calculate MD5 hash of a file for change detection.

        Args:
            file_path: Path to the file

        Returns:
            MD5 hash string
        """
        try:
            with open(file_path, 'rb') as f:
                file_hash = hashlib.md5()
                for chunk in iter(lambda: f.read(4096), b""):
                    file_hash.update(chunk)
                return file_hash.hexdigest()
        except OSError as e:
            logger.error(f"Error calculating file hash for {file_path}: {str(e)}")
            return ""

    def _is_cache_valid(self, cache_entry: DataCacheEntry) -> bool:
        """
        Check if cache entry is still valid.

        Args:
            cache_entry: Cache entry to validate

        Returns:
            True if cache is valid, False otherwise
        """
        if not os.path.exists(cache_entry.file_path):
            logger.warning(f"Cached file no longer exists: {cache_entry.file_path}")
            return False

        current_hash = self._get_file_hash(cache_entry.file_path)
        if current_hash != cache_entry.file_hash:
            logger.info(f"File has been modified: {cache_entry.file_path}")
            return False

        if datetime.now() - cache_entry.last_updated > self.cache_ttl:
            logger.info(f"Cache has expired for: {cache_entry.file_path}")
            return False

        return True

    def load_campaigns(self, file_path: Optional[str] = None) -> List[Campaign]:
        """
        Load and cache campaigns from an export file.

        Args:
            file_path: Path to the export. Uses default if None.

        Returns:
            List of campaigns

        Raises:
            FileNotFoundError: If the export file is not found
            ValueError: If the export is unreadable, of an unsupported format
                or over the configured size limit
        """
        if file_path is None:
            file_path = self.default_data_path

        if (self._cache and
                self._cache.file_path == file_path and
                self._is_cache_valid(self._cache)):

            self._cache.last_accessed = datetime.now()
            logger.info("Using in-memory campaign cache")
            return self._cache.campaigns

        logger.info(f"Parsing campaigns from: {file_path}")
        try:
            parser = CampaignFileParser(
                file_path,
                strict_status=self.config.strict_status_migration,
                supported_formats=self.config.supported_file_formats,
                max_size_bytes=self.config.max_file_size_bytes
            )
            campaigns = parser.parse_all()
        except (OSError, ValueError) as e:
            error_info = error_handler.classify_error(e, "campaign import")
            error_handler.log_error(error_info, "Campaign import")
            raise

        self._record_issues(parser.issues)

        self._cache = DataCacheEntry(
            campaigns=campaigns,
            file_path=file_path,
            file_hash=self._get_file_hash(file_path),
            last_updated=datetime.now(),
            last_accessed=datetime.now()
        )

        logger.info("Campaign data loaded and cached successfully")
        return campaigns

    def load_records(self, records: List[Dict[str, Any]]) -> List[Campaign]:
        """
        Parse campaign records supplied by the document database.

        Records are not cached; skipped records are reported in
        `last_issues`.
        """
        parser = CampaignRecordParser(strict_status=self.config.strict_status_migration)
        campaigns, issues = parser.parse_records(records)
        self._record_issues(issues)
        return campaigns

    def _record_issues(self, issues: List[Dict[str, Any]]):
        self.last_issues = issues
        for issue in issues:
            location = f"row {issue['row']}" if 'row' in issue else f"record {issue['index']}"
            error_info = error_handler.classify_error(
                ValueError(f"{location}: {issue['message']}"), "campaign import"
            )
            error_handler.log_error(error_info, "Campaign import")

    def get_campaigns(self, file_path: Optional[str] = None, **filters) -> List[Campaign]:
        """
        Load campaigns and apply dashboard filters.

        Keyword filters are those of filter_campaigns: status, channel,
        start and end.
        """
        return filter_campaigns(self.load_campaigns(file_path), **filters)

    def get_status_updates(self, today: Optional[date] = None,
                           file_path: Optional[str] = None) -> List[StatusUpdate]:
        """Status writes the daily refresh would make for the loaded campaigns."""
        return refresh_campaign_statuses(self.load_campaigns(file_path), today or date.today())

    def resolve_form_status(self, campaign: Campaign,
                            now: Optional[date] = None) -> Tuple[StatusResolution, Optional[Dict[str, Any]]]:
        """
        Run the form status policy and build the notification to show.

        Args:
            campaign: Campaign being edited
            now: Reference date, defaults to today

        Returns:
            Tuple of (resolution, notification or None)
        """
        resolution = resolve_display_status(
            campaign,
            now or date.today(),
            warning_seconds=self.config.status_warning_seconds,
            info_seconds=self.config.status_info_seconds
        )
        notification = None
        if resolution.notice is not None:
            notification = error_handler.create_status_notification(resolution.notice)
        return resolution, notification

    def get_dashboard_summary(self, file_path: Optional[str] = None, **filters) -> Dict[str, Any]:
        """
        KPI cards, alert panels and status filter options for the dashboard.

        Args:
            file_path: Campaign export path. Uses default if None.
            **filters: status, channel, start and end filters

        Returns:
            Dictionary with kpis, performance_alerts, budget_alerts,
            statuses_in_use and campaign_count
        """
        all_campaigns = self.load_campaigns(file_path)
        campaigns = filter_campaigns(all_campaigns, **filters)

        return {
            'kpis': calculate_kpis(campaigns),
            'performance_alerts': detect_performance_alerts(campaigns),
            'budget_alerts': detect_budget_alerts(campaigns),
            'statuses_in_use': statuses_in_use(all_campaigns),
            'campaign_count': len(campaigns),
        }

    def clear_cache(self):
        """Drop the cached campaigns."""
        self._cache = None
        logger.info("Campaign cache cleared")

    def get_cache_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the campaign cache.

        Returns:
            Dictionary containing cache statistics
        """
        stats = {
            'in_memory': self._cache is not None,
            'file_path': None,
            'campaigns': 0,
            'last_updated': None,
            'last_accessed': None,
            'issues': len(self.last_issues),
        }

        if self._cache:
            stats.update({
                'file_path': self._cache.file_path,
                'campaigns': len(self._cache.campaigns),
                'last_updated': self._cache.last_updated.isoformat(),
                'last_accessed': self._cache.last_accessed.isoformat(),
            })

        return stats
