"""
Error taxonomy shared by every handler group.
"""


class ZKWatchError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500


class AuthError(ZKWatchError):
    """Missing or invalid bearer token."""

    status_code = 401


class UpstreamError(ZKWatchError):
    """The REST store answered with a non-2xx status."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class UnknownActionError(ZKWatchError):
    def __init__(self, action: object):
        super().__init__(f"Unknown action: {action}")
        self.action = action


class InvalidPayloadError(ZKWatchError):
    pass


class NotFoundError(ZKWatchError):
    pass
