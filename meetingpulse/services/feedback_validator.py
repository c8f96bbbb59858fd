# meetingpulse/services/feedback_validator.py
from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from meetingpulse.core.errors import NotFoundError, ValidationError
from meetingpulse.schemas.feedback import (
    VALID_REASONS,
    Feedback,
    FeedbackReason,
    FeedbackRequest,
    FeedbackValue,
)
from meetingpulse.schemas.meeting import Meeting, ensure_utc

DEFAULT_COMMENT_MAX_LENGTH = 1000

# Transport uses camelCase; internal callers may pass snake_case.
_FIELD_ALIASES = {
    "meeting_id": ("meetingId", "meeting_id"),
    "user_id": ("userId", "user_id"),
}


def new_feedback_id() -> str:
    return f"feedback-{uuid4().hex}"


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _clean(value: Any, field: str) -> str | None:
    """
    Strip a string field; blank strings become None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Field '{field}' must be a string.")
    value = value.strip()
    return value or None


def validate_feedback_request(
    raw: Mapping[str, Any],
    comment_max_length: int = DEFAULT_COMMENT_MAX_LENGTH,
) -> FeedbackRequest:
    """
    Validate and normalize a raw feedback request.

    Checks, in order
    ----------------
    1) meetingId, userId and value are present and non-blank
    2) value is one of worth_it / async / waste
    3) reason, when given, is known and allowed for that value
    4) comment, when given, is within the length limit

    Raises
    ------
    ValidationError
        With a short, human-readable reason for the first failed check.
    """
    meeting_id = _clean(_pick(raw, *_FIELD_ALIASES["meeting_id"]), "meetingId")
    user_id = _clean(_pick(raw, *_FIELD_ALIASES["user_id"]), "userId")
    value_raw = _clean(raw.get("value"), "value")

    missing = [
        name
        for name, present in (
            ("meetingId", meeting_id),
            ("userId", user_id),
            ("value", value_raw),
        )
        if not present
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    try:
        value = FeedbackValue(value_raw)
    except ValueError:
        raise ValidationError(f"Invalid feedback value '{value_raw}'.") from None

    reason: FeedbackReason | None = None
    reason_raw = _clean(raw.get("reason"), "reason")
    if reason_raw is not None:
        try:
            reason = FeedbackReason(reason_raw)
        except ValueError:
            raise ValidationError(f"Unknown feedback reason '{reason_raw}'.") from None
        if reason not in VALID_REASONS[value]:
            raise ValidationError(
                f"Reason '{reason.value}' is not valid for feedback value '{value.value}'."
            )

    comment = _clean(raw.get("comment"), "comment")
    if comment is not None and len(comment) > comment_max_length:
        raise ValidationError(
            f"Comment exceeds the maximum length of {comment_max_length} characters."
        )

    return FeedbackRequest(
        meeting_id=meeting_id,
        user_id=user_id,
        value=value,
        reason=reason,
        comment=comment,
    )


def build_feedback(
    request: FeedbackRequest,
    meeting: Meeting | None,
    now: datetime | None = None,
    feedback_id: str | None = None,
) -> Feedback:
    """
    Bind a validated request to its meeting and stamp it.

    `meeting` is whatever the store returned for request.meeting_id; None
    means the meeting is unknown.
    """
    if meeting is None:
        raise NotFoundError(f"Meeting with id={request.meeting_id} not found.")

    submitted_at = ensure_utc(now) if now is not None else datetime.now(tz=timezone.utc)

    return Feedback(
        id=feedback_id or new_feedback_id(),
        meeting_id=meeting.id,
        user_id=request.user_id,
        value=request.value,
        reason=request.reason,
        comment=request.comment,
        submitted_at=submitted_at,
    )


def submit_feedback(
    raw: Mapping[str, Any],
    meeting_lookup: Callable[[str], Meeting | None],
    now: datetime | None = None,
    comment_max_length: int = DEFAULT_COMMENT_MAX_LENGTH,
) -> Feedback:
    """
    Validate a raw request and produce the Feedback record to persist.

    Persistence is left to the caller.
    """
    request = validate_feedback_request(raw, comment_max_length=comment_max_length)
    meeting = meeting_lookup(request.meeting_id)
    return build_feedback(request, meeting, now=now)
