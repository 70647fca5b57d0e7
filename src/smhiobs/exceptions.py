"""
Exceptions for SMHI observation operations.
"""

from typing import Any, Dict, Optional


class SMHIError(Exception):
    """Base exception for smhiobs errors."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}


class SMHIValidationError(SMHIError):
    """Caller supplied bad or insufficient input."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field})
        self.field = field


class SMHINotFoundError(SMHIError):
    """No station, parameter or data matched the request."""

    code = "NOT_FOUND"

    def __init__(self, resource_type: str, identifier: str):
        super().__init__(
            f"{resource_type} not found: {identifier}",
            {"resource_type": resource_type, "identifier": identifier},
        )
        self.resource_type = resource_type
        self.identifier = identifier


class SMHIConnectionError(SMHIError):
    """Error talking to an SMHI service (status, network or timeout)."""

    code = "UPSTREAM_API_ERROR"

    def __init__(self, message: str, status_code: int = 0, origin: str = ""):
        super().__init__(message, {"status_code": status_code, "origin": origin})
        self.status_code = status_code
        self.origin = origin


class SMHIQueryError(SMHIError):
    """Error decoding an SMHI response."""

    code = "QUERY_ERROR"


class SMHIArchiveFormatError(SMHIQueryError):
    """Archive document does not match any known table layout."""

    pass
