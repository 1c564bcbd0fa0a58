"""Domain errors shared by services and the HTTP layer."""


class MatchReelError(Exception):
    """Base class for errors reported back to API callers."""
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(MatchReelError):
    """Malformed, missing or out-of-range request fields."""
    status_code = 400


class NotFound(MatchReelError):
    """A referenced video or artifact does not exist."""
    status_code = 404


class TranscodeFailure(MatchReelError):
    """The transcode collaborator reported an error."""
    status_code = 500


class ExportFailed(TranscodeFailure):
    """Cutting or merging highlight clips failed."""


class ProbeFailed(TranscodeFailure):
    """Reading video metadata failed."""
