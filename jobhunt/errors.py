"""Error types shared across the tracker."""


class TrackerError(Exception):
    """Base class for tracker errors."""


class ConfigurationError(TrackerError):
    """A credential, identifier or config file needed by an operation is missing.

    Fatal for the requested operation and never retried automatically.
    """


class ServiceError(TrackerError):
    """An external collaborator was unreachable or rejected the request.

    Local state is left unchanged; the operator may retry by hand.
    """


class ExtractionError(ServiceError):
    """The structured-extraction service failed or returned an unusable reply."""


class SheetsError(ServiceError):
    """The remote spreadsheet could not be read or written."""
