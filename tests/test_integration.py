"""
Integration tests for the campaign data manager.
Tests loading, caching, status handling and dashboard summaries end to end.
"""

import pytest
import tempfile
import os
import pandas as pd
from datetime import date, timedelta
from unittest.mock import patch

from config.settings import AppConfig
from data.manager import CampaignDataManager
from models.data_models import Campaign, Status, StatusUpdate
from business_logic.error_handler import error_handler


class TestCampaignDataManager:
    """Test the campaign data manager against real export files."""

    def setup_method(self):
        """Set up test fixtures with a campaign export."""
        self.temp_dir = tempfile.mkdtemp()
        self.export_file = os.path.join(self.temp_dir, 'campaigns.xlsx')
        self.today = date(2025, 6, 26)

        self._create_campaign_export()

        self.manager = CampaignDataManager(data_path=self.export_file, config=AppConfig())

    def teardown_method(self):
        """Clean up test fixtures."""
        import shutil
        shutil.rmtree(self.temp_dir)

    def _create_campaign_export(self):
        """Create a campaign export mirroring the dashboard collection."""
        data = {
            'id': ['tv-1', 'tv-2', 'meta-1', 'google-1', 'radio-1', 'tiktok-1', 'broken'],
            'channel': ['TV', 'TV', 'Meta', 'Google', 'Radio', 'TikTok', 'Cinema'],
            'brand': ['Acme', 'Beta', 'Acme', 'Beta', 'Gamma', 'Gamma', 'Delta'],
            'region': ['North', 'South', 'North', 'South', 'North', 'South', 'North'],
            'startDate': ['2025-06-01', '2025-07-01', '2025-05-01', '2025-06-01',
                          '2025-06-20', '2025-06-01', 'not a date'],
            'endDate': ['2025-06-30', '2025-07-31', '2025-05-31', '2025-06-25',
                        '2025-07-20', '2025-06-30', '2025-06-30'],
            'budget': [50000, 40000, 2000, 8000, 5000, 1000, 100],
            'leads': [0, 0, 20, 20, 10, 5, 0],
            'costPerLead': [None, None, 100, 400, 160, None, None],
            'extraSocialBudget': [None, None, 1200, None, None, 200, None],
            'expectedGrps': [200, 100, None, None, None, None, None],
            'achievedGrps': [150, None, None, None, None, None, None],
            'status': ['OK', 'LOADED', 'SCHEDULED', 'ACTIVE', 'LOADED', 'CANCELLED', 'PLANNED'],
        }
        with pd.ExcelWriter(self.export_file, engine='openpyxl') as writer:
            pd.DataFrame(data).to_excel(writer, sheet_name='Campaigns', index=False)

    def test_load_campaigns(self):
        """Campaigns are parsed, migrated and bad rows reported."""
        campaigns = self.manager.load_campaigns()

        assert len(campaigns) == 6
        assert [c.status for c in campaigns[:3]] == ['ACTIVE', 'SCHEDULED', 'SCHEDULED']
        assert len(self.manager.last_issues) == 1
        assert self.manager.last_issues[0]['row'] == 8

    def test_cache_reuse_and_invalidation(self):
        """The export is parsed once until it changes."""
        first = self.manager.load_campaigns()
        assert self.manager.load_campaigns() is first

        stats = self.manager.get_cache_stats()
        assert stats['in_memory'] is True
        assert stats['campaigns'] == 6
        assert stats['issues'] == 1

        pd.DataFrame({'channel': ['TV'], 'budget': [10]}).to_excel(self.export_file, index=False)
        reloaded = self.manager.load_campaigns()
        assert len(reloaded) == 1

        self.manager.clear_cache()
        assert self.manager.get_cache_stats()['in_memory'] is False

    def test_zero_cache_ttl_reparses(self):
        """A zero TTL disables reuse of the parsed export."""
        manager = CampaignDataManager(data_path=self.export_file, cache_ttl_hours=0, config=AppConfig())
        assert manager.cache_ttl == timedelta(0)

        first = manager.load_campaigns()
        second = manager.load_campaigns()

        assert second is not first
        assert [c.id for c in second] == [c.id for c in first]

    def test_cache_ttl_defaults_to_config(self):
        """Without an explicit TTL the configured timeout applies."""
        manager = CampaignDataManager(data_path=self.export_file, config=AppConfig(cache_timeout_hours=6))
        assert manager.cache_ttl == timedelta(hours=6)

    def test_oversized_export(self):
        """Exports over the configured size limit are refused and logged."""
        manager = CampaignDataManager(data_path=self.export_file, config=AppConfig(max_file_size_mb=0))

        with patch.object(error_handler, 'log_error') as mock_log:
            with pytest.raises(ValueError, match='too large'):
                manager.load_campaigns()

        mock_log.assert_called_once()
        assert mock_log.call_args[0][0].user_message == \
            "The campaign export is larger than the allowed upload size."

    def test_configured_formats(self):
        """Only the configured export formats are loaded."""
        manager = CampaignDataManager(data_path=self.export_file,
                                      config=AppConfig(supported_file_formats=['.csv']))

        with patch.object(error_handler, 'log_error'):
            with pytest.raises(ValueError, match='Unsupported campaign file format'):
                manager.load_campaigns()

    def test_missing_export(self):
        """A missing export is logged through the error handler and raised."""
        with patch.object(error_handler, 'log_error') as mock_log:
            with pytest.raises(FileNotFoundError):
                self.manager.load_campaigns(os.path.join(self.temp_dir, 'missing.xlsx'))

        mock_log.assert_called_once()

    def test_status_updates(self):
        """The daily refresh activates and completes campaigns."""
        updates = self.manager.get_status_updates(self.today)

        assert updates == [
            StatusUpdate('meta-1', Status.SCHEDULED, Status.COMPLETED),
            StatusUpdate('google-1', Status.ACTIVE, Status.COMPLETED),
            StatusUpdate('radio-1', Status.SCHEDULED, Status.ACTIVE),
        ]

    def test_resolve_form_status(self):
        """Form status resolution produces toast notifications."""
        scheduled = Campaign(channel='TV', status='SCHEDULED', start_date=None, end_date=date(2025, 7, 1))
        resolution, notification = self.manager.resolve_form_status(scheduled, self.today)

        assert resolution.status == Status.PLANNED
        assert notification['type'] == 'warning'
        assert notification['dismiss_after'] == 5.0

        planned = Campaign(channel='TV', status='PLANNED',
                           start_date=date(2025, 6, 1), end_date=date(2025, 6, 30))
        resolution, notification = self.manager.resolve_form_status(planned, self.today)

        assert resolution.status == Status.ACTIVE
        assert notification['type'] == 'info'
        assert notification['message'] == 'Status updated automatically to "Active" based on selected dates.'
        assert notification['dismiss_after'] == 4.0

        cancelled = Campaign(channel='TV', status='CANCELLED',
                             start_date=date(2025, 6, 1), end_date=date(2025, 6, 30))
        resolution, notification = self.manager.resolve_form_status(cancelled, self.today)

        assert resolution.status == Status.CANCELLED
        assert notification is None

    def test_notice_durations_follow_config(self):
        """Notice delays come from the configuration."""
        manager = CampaignDataManager(
            data_path=self.export_file,
            config=AppConfig(status_warning_seconds=8, status_info_seconds=2)
        )
        campaign = Campaign(channel='TV', status='SCHEDULED')

        _, notification = manager.resolve_form_status(campaign, self.today)

        assert notification['dismiss_after'] == 8

    def test_dashboard_summary(self):
        """KPIs and alert panels are computed over the filtered set."""
        summary = self.manager.get_dashboard_summary()

        assert summary['campaign_count'] == 6
        kpis = summary['kpis']
        assert kpis.total_budget == 106000
        assert kpis.total_leads == 55
        assert kpis.grp_shortfall_campaigns == 1
        assert kpis.high_cpl_campaigns == 2
        assert kpis.avg_grp_efficiency == pytest.approx(0.75)

        assert [(a.campaign_id, a.type) for a in summary['performance_alerts']] == [
            ('tv-1', 'grp'), ('google-1', 'cpl'), ('radio-1', 'cpl')
        ]
        assert [a.campaign_id for a in summary['budget_alerts']] == ['meta-1']
        assert summary['statuses_in_use'] == [
            Status.ACTIVE, Status.CANCELLED, Status.SCHEDULED
        ]

    def test_dashboard_summary_filtered(self):
        """Filters narrow the KPIs but not the status options."""
        summary = self.manager.get_dashboard_summary(channel='TV')

        assert summary['campaign_count'] == 2
        assert summary['kpis'].total_budget == 90000
        assert summary['budget_alerts'] == []
        assert len(summary['statuses_in_use']) == 3

    def test_get_campaigns_by_status(self):
        """Status filters match legacy codes after migration."""
        scheduled = self.manager.get_campaigns(status='LOADED')

        assert [c.id for c in scheduled] == ['tv-2', 'meta-1', 'radio-1']

    def test_load_records(self):
        """Database records are parsed without touching the cache."""
        campaigns = self.manager.load_records([
            {'channel': 'Meta', 'status': 'OK', 'budget': 100},
            {'status': 'OK'},
        ])

        assert len(campaigns) == 1
        assert campaigns[0].status == 'ACTIVE'
        assert self.manager.last_issues[0]['index'] == 1
        assert self.manager.get_cache_stats()['in_memory'] is False
