"""Exception types raised by the dashboard backend."""


class DashboardError(Exception):
    """Base class for errors surfaced to the dashboard user."""


class StoreError(DashboardError):
    """A read or write against the record store failed."""


class ExtractionError(DashboardError):
    """The AI extraction service rejected or failed to parse a document."""


class AuthorizationError(DashboardError):
    """The caller is not allowed to perform the requested action."""
