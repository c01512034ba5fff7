"""Service-layer errors, translated to HTTP responses by the app's exception handlers."""


class ServiceError(Exception):
    """Base class for expected failures with a user-facing message."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationFailedError(ServiceError):
    """Request content is malformed (400)."""

    status_code = 400


class ForbiddenError(ServiceError):
    """Resource exists but the caller may not act on it (403)."""

    status_code = 403


class NotFoundError(ServiceError):
    """
    Resource is absent or owned by another user (404).

    The two cases are deliberately indistinguishable.
    """

    status_code = 404


class ConflictError(ServiceError):
    """A resource with the same (user, name) already exists (409)."""

    status_code = 409
