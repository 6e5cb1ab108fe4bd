"""
Domain errors raised by the service layer.
Routes never build these into responses by hand: main.py registers a single
handler that maps each class onto its HTTP status.
"""


class SalesboardError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class AuthorizationError(SalesboardError):
    """Caller is not a member of the organization (and not a super admin)."""
    status_code = 403


class ForbiddenError(AuthorizationError):
    """Caller is a member but their role is below the one required."""
    status_code = 403


class NotFoundError(SalesboardError):
    status_code = 404


class InvalidInputError(SalesboardError):
    status_code = 400


class ConflictError(SalesboardError):
    status_code = 400
