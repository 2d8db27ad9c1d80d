"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to at the request boundary
(see ``main.register_exception_handlers``).
"""


class PortalError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    status_code = 400


class ConflictError(PortalError):
    status_code = 409


class AuthenticationError(PortalError):
    status_code = 401


class AuthorizationError(PortalError):
    status_code = 403


class NotFoundError(PortalError):
    status_code = 404
