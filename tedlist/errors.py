"""
Error taxonomy shared by services and blueprints.

Services raise these; the handler registered in create_app() renders them as
{"success": false, "error": <kind>, "message": <text>} with the matching
HTTP status. Messages must be safe to show to untrusted clients.
"""


class TedlistError(Exception):
    status_code = 500
    kind = "error"
    default_message = "Something went wrong"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class Unauthenticated(TedlistError):
    status_code = 401
    kind = "unauthenticated"
    default_message = "User not authenticated"


class Forbidden(TedlistError):
    status_code = 403
    kind = "forbidden"
    default_message = "Not allowed"


class NotFound(TedlistError):
    status_code = 404
    kind = "not_found"
    default_message = "Not found"


class InvalidState(TedlistError):
    status_code = 409
    kind = "invalid_state"
    default_message = "Operation not valid in the current state"


class Conflict(InvalidState):
    """A concurrent or repeated write lost a compare-and-swap."""
    kind = "conflict"
    default_message = "Resource was modified by another operation"


class ValidationError(TedlistError):
    status_code = 400
    kind = "validation_error"
    default_message = "Invalid input"

    def __init__(self, message: str = None, fields: dict = None):
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.fields:
            data["fields"] = self.fields
        return data


class Unavailable(TedlistError):
    status_code = 503
    kind = "unavailable"
    default_message = "A downstream service is unavailable"
