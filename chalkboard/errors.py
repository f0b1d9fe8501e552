class TutorError(Exception):
    """Base class for failures that end a request with an ``{"error": ...}`` body."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(TutorError):
    """A required part of the request is missing."""

    status_code = 400


class UpstreamUnavailableError(TutorError):
    """The model or speech service could not be reached."""

    status_code = 502


class UpstreamReportedError(TutorError):
    """The model or speech service answered with an error of its own."""

    status_code = 500
