"""Custom exception classes."""


class WorkshopError(Exception):
    """Base class for workshop registry errors."""
    pass


class ValidationError(WorkshopError):
    """Raised when registration or attendance input fails validation."""
    pass


class ParticipantNotFoundError(WorkshopError):
    """Raised when a participant ID doesn't exist."""
    pass


class PersistenceError(WorkshopError):
    """Raised when unable to write the workshop data file."""
    pass


class SyncError(WorkshopError):
    """Raised when the webhook is unconfigured, unreachable or rejects a call."""
    pass


class ImportFormatError(WorkshopError):
    """Raised when an uploaded backup file is malformed."""
    pass


class CameraError(WorkshopError):
    """Raised when camera access is denied or unsupported."""
    pass
