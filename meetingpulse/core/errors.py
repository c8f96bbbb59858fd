# meetingpulse/core/errors.py
from http import HTTPStatus


class MeetingPulseError(Exception):
    """
    Base class for all domain errors raised by the MeetingPulse core.

    Each subclass carries the HTTP status the transport layer should use
    when surfacing it, so route handlers never have to map them by hand.
    """

    status_code: int = HTTPStatus.BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(MeetingPulseError):
    """Malformed, missing or inconsistent input."""

    status_code = HTTPStatus.BAD_REQUEST


class NotFoundError(MeetingPulseError):
    """Reference to a Meeting or Team that does not exist."""

    status_code = HTTPStatus.NOT_FOUND


class InvalidTokenError(MeetingPulseError):
    """Magic-link token never existed or was already consumed."""

    status_code = HTTPStatus.UNAUTHORIZED


class ExpiredTokenError(MeetingPulseError):
    """Magic-link token exists but its expiry has passed."""

    status_code = HTTPStatus.UNAUTHORIZED


class AggregationInputError(MeetingPulseError):
    """
    Malformed meeting/feedback population, e.g. a meeting whose end_time is
    not after its start_time, or feedback pointing at an unknown meeting.
    """

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
