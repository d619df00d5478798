"""
Centralized error handling and user feedback for the campaign engine.

Classifies failures raised while importing campaign exports, validating
duplication input and migrating stored statuses, and turns them, along with
the status resolver's notices, into dashboard notifications.
"""

import logging
from typing import Dict, Any, Optional
from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timedelta

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MAX_ERROR_HISTORY = 100


class ErrorSeverity(Enum):
    """Severity levels, shared by errors and status notices."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Where a failure originated."""
    DATA_ERROR = "data_error"
    VALIDATION_ERROR = "validation_error"
    STATUS_ERROR = "status_error"
    SYSTEM_ERROR = "system_error"


class ValidationError(Exception):
    """Raised when user-supplied campaign input is rejected."""
    pass


class UnknownStatusError(ValueError):
    """Raised by strict status migration for values outside the status set."""

    def __init__(self, raw_status: str):
        self.raw_status = raw_status
        super().__init__(f"Unknown campaign status: {raw_status!r}")


@dataclass
class ErrorInfo:
    """Structured error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    user_message: str
    technical_details: Optional[str] = None
    suggested_action: Optional[str] = None
    retry_possible: bool = False
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


NOTIFICATION_TITLES = {
    ErrorCategory.DATA_ERROR: "Campaign Import Error",
    ErrorCategory.VALIDATION_ERROR: "Input Validation Error",
    ErrorCategory.STATUS_ERROR: "Campaign Status Error",
    ErrorCategory.SYSTEM_ERROR: "System Error",
}

LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class ErrorHandler:
    """
    Error classification and notification builder for the dashboard.

    Keeps a bounded history of logged errors for the admin statistics view.
    """

    def __init__(self):
        self.error_history = []

    def handle_data_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Handle campaign import failures (missing export, bad format, bad rows).

        Args:
            error: The data exception
            context: Operation that failed

        Returns:
            ErrorInfo describing the failure
        """
        detail = str(error)
        lowered = detail.lower()

        if isinstance(error, FileNotFoundError):
            return ErrorInfo(
                category=ErrorCategory.DATA_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Campaign export missing: {detail}",
                user_message="The campaign export file could not be found.",
                suggested_action="Check the CAMPAIGN_DATA_PATH setting or upload a new export."
            )

        if isinstance(error, PermissionError):
            return ErrorInfo(
                category=ErrorCategory.DATA_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Campaign export not readable: {detail}",
                user_message="The campaign export cannot be opened with the current permissions.",
                suggested_action="Ask an administrator to grant read access to the export."
            )

        if lowered.startswith("unsupported campaign file format"):
            return ErrorInfo(
                category=ErrorCategory.DATA_ERROR,
                severity=ErrorSeverity.ERROR,
                message=detail,
                user_message="The campaign export must be an Excel (.xlsx, .xls) or CSV file.",
                suggested_action="Re-export the campaigns in a supported format."
            )

        if lowered.startswith("campaign file too large"):
            return ErrorInfo(
                category=ErrorCategory.DATA_ERROR,
                severity=ErrorSeverity.ERROR,
                message=detail,
                user_message="The campaign export is larger than the allowed upload size.",
                suggested_action="Split the export or raise the MAX_FILE_SIZE_MB setting."
            )

        if "invalid" in lowered or "unknown campaign status" in lowered:
            # Row-level problems: the rest of the export is still usable
            return ErrorInfo(
                category=ErrorCategory.DATA_ERROR,
                severity=ErrorSeverity.WARNING,
                message=f"Skipped campaign record: {detail}",
                user_message="Some campaign records contain invalid values and were skipped.",
                technical_details=detail,
                suggested_action="Fix the reported rows in the export and reload."
            )

        return ErrorInfo(
            category=ErrorCategory.DATA_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Campaign data error in {context or 'import'}: {detail}",
            user_message="The campaign data could not be processed.",
            technical_details=detail,
            suggested_action="Check the campaign export and try again."
        )

    def handle_validation_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """Duplication and form input errors; their message is shown as is."""
        return ErrorInfo(
            category=ErrorCategory.VALIDATION_ERROR,
            severity=ErrorSeverity.WARNING,
            message=f"Rejected input in {context or 'form'}: {error}",
            user_message=str(error),
            suggested_action="Correct the highlighted fields and try again."
        )

    def handle_status_error(self, error: UnknownStatusError, context: str = "") -> ErrorInfo:
        """Stored status outside the known set, reported by strict migration."""
        return ErrorInfo(
            category=ErrorCategory.STATUS_ERROR,
            severity=ErrorSeverity.WARNING,
            message=f"Unrecognized status {error.raw_status!r} in {context or 'campaign data'}",
            user_message=str(error),
            technical_details=error.raw_status,
            suggested_action="Set the campaign to one of Planned, Scheduled, Active, Completed or Cancelled."
        )

    def classify_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Map an exception to structured error information.

        Args:
            error: The exception to classify
            context: Operation that failed

        Returns:
            ErrorInfo for the matching category
        """
        if isinstance(error, UnknownStatusError):
            return self.handle_status_error(error, context)

        if isinstance(error, ValidationError):
            return self.handle_validation_error(error, context)

        if isinstance(error, (OSError, ValueError, TypeError)):
            return self.handle_data_error(error, context)

        return ErrorInfo(
            category=ErrorCategory.SYSTEM_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Unexpected error in {context or 'campaign engine'}: {error}",
            user_message="An unexpected error occurred. Please try again or contact support.",
            technical_details=f"{type(error).__name__}: {error}",
            suggested_action="Try again. If the problem persists, contact support with the error details.",
            retry_possible=True
        )

    def create_user_notification(self, error_info: ErrorInfo,
                                 dismiss_after: Optional[float] = None) -> Dict[str, Any]:
        """
        Build the notification payload for an error.

        Args:
            error_info: Structured error information
            dismiss_after: Seconds before the dashboard hides the notification

        Returns:
            Notification dictionary for the UI
        """
        severity = error_info.severity
        notification = {
            'type': 'error' if severity == ErrorSeverity.CRITICAL else severity.value,
            'title': NOTIFICATION_TITLES.get(error_info.category, "Error"),
            'message': error_info.user_message,
            'timestamp': error_info.timestamp.isoformat(),
            'dismissible': severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING),
            'retry_possible': error_info.retry_possible
        }

        if dismiss_after is not None:
            notification['dismiss_after'] = dismiss_after
        if error_info.suggested_action:
            notification['action'] = error_info.suggested_action
        if severity == ErrorSeverity.CRITICAL and error_info.technical_details:
            notification['technical_details'] = error_info.technical_details

        return notification

    def create_status_notification(self, notice) -> Dict[str, Any]:
        """
        Build the toast payload for a status resolver notice.

        Args:
            notice: StatusNotice produced by the status resolver

        Returns:
            Notification dictionary for the UI
        """
        if notice.severity == ErrorSeverity.WARNING:
            title = "Status Updated"
        else:
            title = "Auto Status Assignment"

        return {
            'type': notice.severity.value,
            'title': title,
            'message': notice.message,
            'timestamp': datetime.now().isoformat(),
            'dismissible': True,
            'retry_possible': False,
            'dismiss_after': notice.dismiss_after,
        }

    def log_error(self, error_info: ErrorInfo, context: str = ""):
        """
        Record an error in the history and the application log.

        Args:
            error_info: Structured error information
            context: Operation that failed
        """
        self.error_history.append(error_info)
        del self.error_history[:-MAX_ERROR_HISTORY]

        message = f"{context}: {error_info.message}" if context else error_info.message
        logger.log(LOG_LEVELS[error_info.severity], message)

    def get_error_statistics(self, window_hours: int = 24) -> Dict[str, Any]:
        """
        Summarize the error history for monitoring.

        Args:
            window_hours: Size of the recent window broken down by category
                and severity

        Returns:
            Dictionary with totals and breakdowns
        """
        if not self.error_history:
            return {'total_errors': 0}

        cutoff = datetime.now() - timedelta(hours=window_hours)
        recent = [info for info in self.error_history if info.timestamp > cutoff]

        by_category: Dict[str, int] = {}
        by_severity: Dict[str, int] = {}
        for info in recent:
            by_category[info.category.value] = by_category.get(info.category.value, 0) + 1
            by_severity[info.severity.value] = by_severity.get(info.severity.value, 0) + 1

        return {
            'total_errors': len(self.error_history),
            f'recent_errors_{window_hours}h': len(recent),
            'category_breakdown': by_category,
            'severity_breakdown': by_severity
        }


# Global error handler instance
error_handler = ErrorHandler()
