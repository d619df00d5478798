#!/usr/bin/env python3
"""
Demonstration of the campaign status and alert engine.

This script loads a campaign export with the CampaignDataManager, resolves
form statuses, computes the daily status refresh and prints the dashboard
KPIs and alerts.
"""

import sys
from datetime import date

from data.manager import CampaignDataManager
from business_logic.formatters import format_budget, format_percentage
from business_logic.kpi_calculator import aggregate_by_channel


def main():
    """Demonstrate the campaign engine on a campaign export."""

    print("=== Campaign Status & Alert Engine Demo ===\n")

    today = date.today()
    manager = CampaignDataManager(data_path=sys.argv[1] if len(sys.argv) > 1 else None)

    print("1. Loading campaigns...")
    campaigns = manager.load_campaigns()
    print(f"   ✓ Loaded {len(campaigns)} campaigns")
    if manager.last_issues:
        print(f"   ! Skipped {len(manager.last_issues)} rows")

    print("\n2. Resolving form statuses...")
    for campaign in campaigns[:5]:
        resolution, notification = manager.resolve_form_status(campaign, today)
        line = f"   ✓ {campaign.display_name}: {campaign.status} -> {resolution.status.value}"
        if notification:
            line += f" ({notification['message']})"
        print(line)

    print("\n3. Daily status refresh...")
    updates = manager.get_status_updates(today)
    print(f"   ✓ {len(updates)} campaigns would change status")
    for update in updates[:5]:
        print(f"     {update.campaign_id}: {update.old_status.value} -> {update.new_status.value}")

    print("\n4. Dashboard KPIs...")
    summary = manager.get_dashboard_summary()
    kpis = summary['kpis']
    print(f"   ✓ Total budget: {format_budget(kpis.total_budget)}")
    print(f"   ✓ Total leads: {kpis.total_leads}")
    print(f"   ✓ Avg CPL: {format_budget(kpis.avg_cpl)}")
    print(f"   ✓ Avg GRP efficiency: {format_percentage(kpis.avg_grp_efficiency * 100)}")
    print(f"   ✓ GRP shortfall campaigns: {kpis.grp_shortfall_campaigns}")
    print(f"   ✓ High CPL campaigns: {kpis.high_cpl_campaigns}")

    print("\n5. Alerts...")
    for alert in summary['performance_alerts'] + summary['budget_alerts']:
        print(f"   [{alert.severity.upper()}] {alert.campaign_name}: {alert.message}")

    print("\n6. Channels...")
    for channel, totals in aggregate_by_channel(campaigns).items():
        print(f"   ✓ {channel}: {format_budget(totals['budget'])} across {totals['campaigns']} campaigns")

    print("\n=== Demo completed successfully! ===")


if __name__ == "__main__":
    main()
