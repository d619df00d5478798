"""
Parsers turning stored campaign records and spreadsheet exports into
Campaign objects.
"""

import pandas as pd
import logging
from typing import Dict, List, Optional, Any, Sequence, Tuple
from datetime import date, datetime
from pathlib import Path

from models.data_models import Campaign
from business_logic.status_resolver import migrate_legacy_status

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Stored (camelCase) field name -> Campaign attribute
FIELD_MAP = {
    'id': 'id',
    'channel': 'channel',
    'brand': 'brand',
    'region': 'region',
    'periodType': 'period_type',
    'startDate': 'start_date',
    'endDate': 'end_date',
    'budget': 'budget',
    'roi': 'roi',
    'costPerLead': 'cost_per_lead',
    'leads': 'leads',
    'manager': 'manager',
    'status': 'status',
    'notes': 'notes',
    'publisher': 'publisher',
    'extraSocialBudget': 'extra_social_budget',
    'extraSocialNotes': 'extra_social_notes',
    'expectedGrps': 'expected_grps',
    'achievedGrps': 'achieved_grps',
    'spotsPurchased': 'spots_purchased',
    'impressions': 'impressions',
    'expectedViewers': 'expected_viewers',
    'expectedViews': 'expected_views',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
}

DATE_FIELDS = ['start_date', 'end_date']
TIMESTAMP_FIELDS = ['created_at', 'updated_at']
FLOAT_FIELDS = [
    'budget', 'cost_per_lead', 'extra_social_budget', 'expected_grps',
    'achieved_grps', 'impressions', 'expected_viewers', 'expected_views'
]
INT_FIELDS = ['leads', 'spots_purchased']
TEXT_FIELDS = [
    'id', 'channel', 'brand', 'region', 'period_type', 'roi', 'manager',
    'notes', 'publisher', 'extra_social_notes'
]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _as_text(value: Any) -> str:
    """Cell text, with whole floats written without the ".0" pandas adds."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class CampaignRecordParser:
    """
    Parser for campaign records as stored by the document database.

    Accepts camelCase or snake_case keys, coerces dates and numbers and
    migrates legacy status codes.
    """

    def __init__(self, strict_status: bool = False):
        """
        Initialize the parser.

        Args:
            strict_status: Reject unknown status values instead of
                falling back to PLANNED
        """
        self.strict_status = strict_status

    def parse_record(self, record: Dict[str, Any]) -> Campaign:
        """
        Convert one stored record into a Campaign.

        Args:
            record: Raw record dictionary

        Returns:
            Parsed Campaign

        Raises:
            ValueError: If the record is missing its channel or holds an
                invalid date or number
        """
        values = {}
        for key, value in record.items():
            attribute = FIELD_MAP.get(key, key)
            if attribute in Campaign.__dataclass_fields__:
                values[attribute] = value

        if _is_missing(values.get('channel')):
            raise ValueError("Invalid campaign record: channel is required")

        parsed: Dict[str, Any] = {}

        for name in TEXT_FIELDS:
            value = values.get(name)
            if not _is_missing(value):
                parsed[name] = _as_text(value)

        for name in DATE_FIELDS:
            parsed[name] = self._parse_date(values.get(name), name)

        for name in TIMESTAMP_FIELDS:
            parsed[name] = self._parse_timestamp(values.get(name))

        for name in FLOAT_FIELDS:
            parsed[name] = self._parse_number(values.get(name), name)

        for name in INT_FIELDS:
            number = self._parse_number(values.get(name), name)
            parsed[name] = int(number) if number is not None else None

        if parsed['budget'] is None:
            parsed['budget'] = 0.0
        if parsed['leads'] is None:
            parsed['leads'] = 0

        parsed['status'] = migrate_legacy_status(
            None if _is_missing(values.get('status')) else values.get('status'),
            strict=self.strict_status
        ).value

        return Campaign(**parsed)

    def parse_records(self, records: List[Dict[str, Any]]) -> Tuple[List[Campaign], List[Dict[str, Any]]]:
        """
        Parse a batch of records, skipping the ones that fail.

        Returns:
            Tuple of (campaigns, issues) where each issue names the record
            index and the failure message
        """
        campaigns = []
        issues = []

        for index, record in enumerate(records):
            try:
                campaigns.append(self.parse_record(record))
            except ValueError as e:
                logger.warning(f"Skipping campaign record {index}: {str(e)}")
                issues.append({'index': index, 'message': str(e)})

        logger.info(f"Parsed {len(campaigns)} campaigns, skipped {len(issues)} records")
        return campaigns, issues

    def _parse_date(self, value: Any, field_name: str) -> Optional[date]:
        if _is_missing(value):
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value).strip()[:10])
        except ValueError:
            raise ValueError(f"Invalid date for {field_name}: {value!r}")

    def _parse_timestamp(self, value: Any) -> Optional[datetime]:
        if _is_missing(value):
            return None
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
        except ValueError:
            logger.warning(f"Ignoring invalid timestamp: {value!r}")
            return None

    def _parse_number(self, value: Any, field_name: str) -> Optional[float]:
        if _is_missing(value):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid number for {field_name}: {value!r}")


class CampaignFileParser:
    """
    Parser for campaign exports in Excel or CSV format.

    Each row is one campaign; column headers use the stored field names.
    """

    SUPPORTED_FORMATS = ('.xlsx', '.xls', '.csv')

    def __init__(self, file_path: str, strict_status: bool = False,
                 supported_formats: Optional[Sequence[str]] = None,
                 max_size_bytes: Optional[int] = None):
        """
        Initialize the parser with a campaign export path.

        Args:
            file_path: Path to the .xlsx, .xls or .csv export
            strict_status: Reject unknown status values
            supported_formats: Accepted extensions, defaults to SUPPORTED_FORMATS
            max_size_bytes: Largest accepted export, unlimited if None

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file extension is not supported or the file
                is over the size limit
        """
        self.file_path = Path(file_path)
        self.record_parser = CampaignRecordParser(strict_status=strict_status)
        self.issues: List[Dict[str, Any]] = []
        formats = [fmt.lower() for fmt in (supported_formats or self.SUPPORTED_FORMATS)]

        if not self.file_path.exists():
            raise FileNotFoundError(f"Campaign file not found: {file_path}")

        if self.file_path.suffix.lower() not in formats:
            raise ValueError(f"Unsupported campaign file format: {self.file_path.suffix}")

        if max_size_bytes is not None:
            size = self.file_path.stat().st_size
            if size > max_size_bytes:
                raise ValueError(
                    f"Campaign file too large: {size} bytes exceeds the {max_size_bytes} byte limit"
                )

    def read_frame(self, sheet_name: Optional[str] = None) -> pd.DataFrame:
        """
        Read the export into a DataFrame with trimmed column names.

        Raises:
            ValueError: If the file cannot be read
        """
        try:
            if self.file_path.suffix.lower() == '.csv':
                df = pd.read_csv(self.file_path)
            else:
                df = pd.read_excel(self.file_path, sheet_name=sheet_name or 0)
        except Exception as e:
            logger.error(f"Error reading campaign file {self.file_path}: {str(e)}")
            raise ValueError(f"Failed to read campaign file: {str(e)}")

        df.columns = [str(column).strip() for column in df.columns]
        return df

    def parse_all(self, sheet_name: Optional[str] = None) -> List[Campaign]:
        """
        Parse every row of the export.

        Rows that fail to parse are skipped; their spreadsheet row numbers
        and messages are kept in `issues`.

        Returns:
            List of parsed campaigns
        """
        df = self.read_frame(sheet_name)
        records = df.to_dict(orient='records')
        campaigns, issues = self.record_parser.parse_records(records)

        # Header occupies the first spreadsheet row
        self.issues = [
            {'row': issue['index'] + 2, 'message': issue['message']}
            for issue in issues
        ]

        logger.info(f"Parsed {len(campaigns)} campaigns from {self.file_path.name}")
        return campaigns
