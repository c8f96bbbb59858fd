# meetingpulse/schemas/insights.py
from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from meetingpulse.schemas.feedback import FeedbackReason


class RecurringSuggestion(str, Enum):
    KEEP = "keep"
    REVIEW = "review"
    CANCEL = "cancel"


class MeetingStats(BaseModel):
    """
    Point-in-time aggregate over a meeting population.
    """

    total_meetings: int = Field(..., example=47)
    total_feedback: int = Field(..., example=38)
    worth_it_percentage: int = Field(
        ...,
        description="round(100 * worth_it / total_feedback); 0 without feedback.",
        example=42,
    )
    async_percentage: int = Field(..., example=31)
    waste_percentage: int = Field(..., example=27)
    avg_meeting_duration: float = Field(
        ...,
        description="Mean meeting duration in minutes.",
        example=45.0,
    )
    recurring_meeting_percentage: int = Field(..., example=68)


class WasteReasonStat(BaseModel):
    reason: FeedbackReason
    count: int = Field(..., example=6)
    percentage: int = Field(
        ...,
        description="Share of attributable waste feedback carrying this reason.",
        example=26,
    )


class RecurringMeetingInsight(BaseModel):
    """
    Health of one recurring meeting series.
    """

    recurrence_id: str = Field(..., example="eng-standup-daily")
    meeting_title: str = Field(..., example="Weekly Standup")
    async_votes: int = Field(..., example=12)
    total_votes: int = Field(..., example=15)
    suggestion: RecurringSuggestion = Field(..., example="cancel")


class TeamInsights(BaseModel):
    """
    Weekly aggregate scoped to one team.
    """

    team_id: str = Field(..., example="team-1")
    team_name: str = Field(..., example="Engineering")
    week_of: date = Field(
        ...,
        description="Monday of the reported week.",
        example="2025-11-10",
    )
    total_meetings: int
    total_meeting_hours: float
    feedback_rate: int = Field(
        ...,
        description="round(100 * total_feedback / total_meetings).",
    )
    worth_it_rate: int
    async_suggestion_rate: int
    top_waste_reasons: list[WasteReasonStat]
    worst_day: str | None = Field(None, example="Tuesday")
    best_day: str | None = Field(None, example="Thursday")
    recurring_meeting_insights: list[RecurringMeetingInsight]
