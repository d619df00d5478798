"""
Tests for campaign filtering and reporting periods.
"""

from datetime import date

import pytest

from models.data_models import Campaign, Status
from business_logic.campaign_filters import (
    filter_campaigns,
    generate_period_options,
    is_campaign_in_date_range,
    is_campaign_in_period,
    months_in_quarter,
    period_bounds,
    quarter_from_month,
    statuses_in_use,
)


@pytest.fixture
def campaigns():
    return [
        Campaign(id='a', channel='TV', status='OK',
                 start_date=date(2025, 1, 15), end_date=date(2025, 2, 10)),
        Campaign(id='b', channel='Meta', status='ACTIVE',
                 start_date=date(2025, 3, 1), end_date=date(2025, 3, 31)),
        Campaign(id='c', channel='TV', status='PENDING',
                 start_date=date(2025, 5, 1), end_date=date(2025, 6, 30)),
        Campaign(id='d', channel='Radio', status='CANCELLED'),
    ]


class TestPeriods:

    @pytest.mark.parametrize('month,quarter', [(1, 'Q1'), (3, 'Q1'), (4, 'Q2'), (9, 'Q3'), (12, 'Q4')])
    def test_quarter_from_month(self, month, quarter):
        assert quarter_from_month(month) == quarter

    def test_months_in_quarter(self):
        assert months_in_quarter('Q2') == [4, 5, 6]
        assert months_in_quarter('Q5') == []

    def test_period_options(self):
        options = generate_period_options(2025)

        assert [q['value'] for q in options['quarters']] == ['Q1 2025', 'Q2 2025', 'Q3 2025', 'Q4 2025']
        assert len(options['months']) == 12
        assert options['months'][2] == {
            'value': 'March 2025', 'label': 'March 2025', 'type': 'monthly', 'month': 3
        }

    def test_period_bounds(self):
        assert period_bounds('February 2024', 'monthly') == (date(2024, 2, 1), date(2024, 2, 29))
        assert period_bounds('Q4 2025', 'quarterly') == (date(2025, 10, 1), date(2025, 12, 31))

    @pytest.mark.parametrize('period,period_type', [
        ('Smarch 2025', 'monthly'),
        ('Q5 2025', 'quarterly'),
        ('March', 'monthly'),
        ('March twenty', 'monthly'),
        ('March 2025', 'weekly'),
    ])
    def test_period_bounds_invalid(self, period, period_type):
        assert period_bounds(period, period_type) is None


class TestDateRange:

    def test_overlap(self, campaigns):
        january = campaigns[0]
        assert is_campaign_in_date_range(january, date(2025, 2, 10), date(2025, 2, 20))
        assert is_campaign_in_date_range(january, date(2025, 1, 1), date(2025, 1, 15))
        assert not is_campaign_in_date_range(january, date(2025, 2, 11), date(2025, 2, 20))

    def test_open_bounds(self, campaigns):
        assert is_campaign_in_date_range(campaigns[0], None, '2025-01-20')
        assert is_campaign_in_date_range(campaigns[0], '2025-02-01', None)

    def test_missing_dates_never_match(self, campaigns):
        assert not is_campaign_in_date_range(campaigns[3], None, None)

    def test_period(self, campaigns):
        assert is_campaign_in_period(campaigns[0], 'January 2025', 'monthly')
        assert is_campaign_in_period(campaigns[0], 'Q1 2025', 'quarterly')
        assert not is_campaign_in_period(campaigns[0], 'March 2025', 'monthly')
        assert not is_campaign_in_period(campaigns[0], 'bad label', 'monthly')


class TestFilterCampaigns:

    def test_no_filters(self, campaigns):
        assert filter_campaigns(campaigns) == campaigns

    def test_status_after_migration(self, campaigns):
        assert [c.id for c in filter_campaigns(campaigns, status='ACTIVE')] == ['a', 'b']
        assert [c.id for c in filter_campaigns(campaigns, status=Status.PLANNED)] == ['c']
        assert [c.id for c in filter_campaigns(campaigns, status='OK')] == ['a', 'b']

    def test_channel_and_dates(self, campaigns):
        result = filter_campaigns(campaigns, channel='TV', start=date(2025, 2, 1), end=date(2025, 5, 1))
        assert [c.id for c in result] == ['a', 'c']

    def test_date_filter_drops_undated(self, campaigns):
        result = filter_campaigns(campaigns, start=date(2024, 1, 1))
        assert [c.id for c in result] == ['a', 'b', 'c']

    def test_statuses_in_use(self, campaigns):
        assert statuses_in_use(campaigns) == [Status.ACTIVE, Status.CANCELLED, Status.PLANNED]
