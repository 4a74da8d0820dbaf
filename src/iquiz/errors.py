class IQuizError(Exception):
    """Base class for every error the quiz service reports to a user."""

    default_message = "Unexpected error"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Fetch path: terminal for one attempt, prior topics are kept ---
class FetchError(IQuizError):
    default_message = "Error fetching data"


class InvalidURL(FetchError):
    default_message = "Invalid URL"


class NetworkUnavailable(FetchError):
    default_message = "Network is not available"


class TransportError(FetchError):
    default_message = "Error fetching data"


class DecodeError(FetchError):
    default_message = "Error decoding JSON"


class RefreshInProgress(FetchError):
    default_message = "A refresh is already in progress"


# --- Quiz flow ---
class InvalidStateTransition(IQuizError):
    default_message = "Invalid quiz state transition"
