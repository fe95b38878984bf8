"""Error taxonomy for agent configuration and vendor sync."""

from typing import Any


class ExhibitAgentError(Exception):
    """Base class. ``status_code`` is the HTTP status surfaced to callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ExhibitAgentError):
    """A required vendor key or secret is missing."""

    status_code = 500


class NotFoundError(ExhibitAgentError):
    status_code = 404


class ValidationError(ExhibitAgentError):
    status_code = 400


class NotPublishedError(ExhibitAgentError):
    status_code = 403


class VendorSyncError(ExhibitAgentError):
    """A vendor API answered with a non-2xx status or could not be reached.

    ``details`` keeps the vendor's raw error body for diagnostics.
    """

    def __init__(self, vendor: str, message: str, *, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.vendor = vendor
        self.vendor_status = status_code
        self.details = details
        # Vendor client errors are passed through, anything else is a bad gateway
        if status_code is not None and 400 <= status_code < 500:
            self.status_code = status_code
        else:
            self.status_code = 502
