"""Error taxonomy for the contact submission pipeline."""


class ContactError(Exception):
    """Base class for contact pipeline errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientError(ContactError):
    """Malformed body or missing fields (400)."""
    status_code = 400


class RateLimited(ContactError):
    """Too many submissions from one client inside the window (429)."""
    status_code = 429

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class PersistenceFailure(ContactError):
    """The submission log could not be read or durably written (500)."""
    status_code = 500


class NotificationError(Exception):
    """Raised by a notification transport when delivery fails. Never reaches the client."""


class ConfigurationError(ValueError):
    """Invalid or incomplete configuration detected at startup."""
