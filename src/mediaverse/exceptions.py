"""Error types raised by storage, import and configuration code."""


class MediaverseError(RuntimeError):
    """Base class for application errors."""


class ConfigurationError(MediaverseError):
    """A required credential or backend is not configured."""


class NotAuthenticatedError(MediaverseError):
    """An operation needs a signed-in user and there is none."""


class NotFoundError(MediaverseError):
    """The requested record does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class RemoteStoreError(MediaverseError):
    """The remote backend reported an error payload."""


class ImportFileError(MediaverseError):
    """An import file could not be read."""
