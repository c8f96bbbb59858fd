# meetingpulse/schemas/feedback.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from meetingpulse.schemas.meeting import ensure_utc


class FeedbackValue(str, Enum):
    """
    The three possible answers to "was this meeting worth it?".
    """

    WORTH_IT = "worth_it"
    ASYNC = "async"
    WASTE = "waste"


class FeedbackReason(str, Enum):
    """
    Optional refinement of a negative answer.
    """

    TOO_LONG = "too_long"
    NO_AGENDA = "no_agenda"
    WRONG_PEOPLE = "wrong_people"
    COULD_BE_EMAIL = "could_be_email"
    PRODUCTIVE = "productive"
    GREAT_DISCUSSION = "great_discussion"
    DECISION_MADE = "decision_made"
    OTHER = "other"


# Reasons a user may attach to each answer. "worth_it" takes none.
VALID_REASONS: dict[FeedbackValue, frozenset[FeedbackReason]] = {
    FeedbackValue.WORTH_IT: frozenset(),
    FeedbackValue.ASYNC: frozenset(
        {
            FeedbackReason.COULD_BE_EMAIL,
            FeedbackReason.NO_AGENDA,
            FeedbackReason.WRONG_PEOPLE,
            FeedbackReason.TOO_LONG,
        }
    ),
    FeedbackValue.WASTE: frozenset(
        {
            FeedbackReason.NO_AGENDA,
            FeedbackReason.WRONG_PEOPLE,
            FeedbackReason.TOO_LONG,
            FeedbackReason.OTHER,
        }
    ),
}


class FeedbackRequest(BaseModel):
    """
    Normalized, validated feedback request produced by the submission
    validator. Not bound to a meeting record yet.
    """

    meeting_id: str
    user_id: str
    value: FeedbackValue
    reason: FeedbackReason | None = None
    comment: str | None = None


class FeedbackSubmission(BaseModel):
    """
    Raw request body accepted by POST /feedback.

    Every field is optional at the schema level so that the domain validator,
    not FastAPI, decides which input is missing or inconsistent.
    """

    model_config = ConfigDict(populate_by_name=True)

    meeting_id: str | None = Field(
        None,
        alias="meetingId",
        description="Identifier of the meeting being rated.",
        example="meeting-1",
    )
    user_id: str | None = Field(
        None,
        alias="userId",
        description="Identifier of the submitting user.",
        example="user-1",
    )
    value: str | None = Field(
        None,
        description="One of worth_it / async / waste.",
        example="async",
    )
    reason: str | None = Field(
        None,
        description="Optional refinement; must match the value's reason set.",
        example="could_be_email",
    )
    comment: str | None = Field(
        None,
        description="Optional free-text comment.",
    )


class Feedback(BaseModel):
    """
    Public representation of a single feedback record.
    """

    id: str = Field(..., example="feedback-5f2c0a...")
    meeting_id: str = Field(..., example="meeting-1")
    user_id: str = Field(..., example="user-1")
    value: FeedbackValue = Field(..., example="async")
    reason: FeedbackReason | None = Field(None, example="could_be_email")
    comment: str | None = None
    submitted_at: datetime = Field(
        ...,
        description="Instant at which the submission was validated.",
    )

    class Config:
        from_attributes = True

    @field_validator("submitted_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class FeedbackList(BaseModel):
    """
    Response payload for GET /feedback.
    """

    feedback: list[Feedback]
    total: int
    filters: dict[str, str | None]


class DismissRequest(BaseModel):
    """
    Body of POST /feedback/dismiss.
    """

    model_config = ConfigDict(populate_by_name=True)

    meeting_id: str = Field(..., alias="meetingId", min_length=1)
    user_id: str = Field(..., alias="userId", min_length=1)
