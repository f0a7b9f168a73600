"""CRM API exception hierarchy.

Every error the API reports on purpose is a CrmError; the class decides
the HTTP status and the message is shown to the user as-is.

Exception Hierarchy:
    CrmError (base, 500)
    ├── Unauthorized (401)
    ├── ValidationFailed (400)
    │   ├── FieldRequired
    │   └── InvalidFormat
    ├── DuplicateEntry (409)
    ├── NotFound (404)
    ├── DatastoreError (400)
    └── ConfigurationError (500)
"""

from typing import Optional


class CrmError(Exception):
    """Base exception for all CRM API errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(CrmError):
    """Session cookie missing, tampered with or expired."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationFailed(CrmError):
    """Client input rejected.

    Raised when:
        - Request body is not a JSON object
        - A field check fails (see subclasses)
    """

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class FieldRequired(ValidationFailed):
    """A required field is absent or blank after trimming."""


class InvalidFormat(ValidationFailed):
    """A field is present but does not have the expected shape."""


class DuplicateEntry(CrmError):
    """A prospect with the same company name (ignoring case) already exists."""

    status_code = 409


class NotFound(CrmError):
    status_code = 404


class DatastoreError(CrmError):
    """The datastore rejected an operation.

    The message is the datastore's own, passed through verbatim.
    """

    status_code = 400


class ConfigurationError(CrmError):
    """Required server configuration is missing."""

    status_code = 500
