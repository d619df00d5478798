# Data layer for campaign ingestion

from .parsers import CampaignRecordParser, CampaignFileParser
from .manager import CampaignDataManager

__all__ = ['CampaignRecordParser', 'CampaignFileParser', 'CampaignDataManager']
