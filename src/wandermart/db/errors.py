# failures raised inside the db package; the service turns them into envelopes


class WanderMartError(Exception):
    """Base class for every expected, user-facing failure."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WanderMartError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.entity_id = entity_id


class EmailTakenError(WanderMartError):
    def __init__(self, email: str):
        super().__init__("Email already exists")
        self.email = email


class ValidationError(WanderMartError):
    """A status or moderation action outside its declared values."""


class UploadError(WanderMartError):
    pass
