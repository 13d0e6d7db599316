class ServiceError(Exception):
    """Backend failure reported to the user with a fixed, generic message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProfileError(ServiceError):
    pass


class RecordError(ServiceError):
    pass


class InvalidRequest(Exception):
    """Malformed client input, answered with HTTP 400."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
