from __future__ import annotations  # Domain error taxonomy shared by rooms and interviews


class ServiceError(Exception):  # Base class carrying the HTTP status it maps to
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):  # Unknown room, participant or session
    status_code = 404


class UnauthorizedError(ServiceError):  # Host secret mismatch
    status_code = 403


class ConflictError(ServiceError):  # State machine precondition violated
    status_code = 409


class InvalidRequestError(ServiceError):  # Missing or empty required field
    status_code = 400


class UpstreamFailure(ServiceError):  # Collaborator call failed or returned unusable output
    status_code = 502


__all__ = [
    "ServiceError",
    "NotFoundError",
    "UnauthorizedError",
    "ConflictError",
    "InvalidRequestError",
    "UpstreamFailure",
]
