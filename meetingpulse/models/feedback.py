# meetingpulse/models/feedback.py
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint

from meetingpulse.db.base import Base


class FeedbackRecord(Base):
    """
    One user's answer for one meeting. Resubmission overwrites the row.
    """

    __tablename__ = "feedback"

    id = Column(String(64), primary_key=True)

    meeting_id = Column(
        String(64),
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(255), nullable=False, index=True)

    value = Column(String(16), nullable=False)
    reason = Column(String(32), nullable=True)
    comment = Column(Text, nullable=True)

    submitted_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "meeting_id",
            "user_id",
            name="uq_feedback_meeting_user",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<FeedbackRecord id={self.id} meeting_id={self.meeting_id} "
            f"user_id={self.user_id} value={self.value}>"
        )


class FeedbackDismissal(Base):
    """
    Records that a user closed a feedback prompt without answering.
    """

    __tablename__ = "feedback_dismissals"

    id = Column(String(64), primary_key=True)
    meeting_id = Column(
        String(64),
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(255), nullable=False, index=True)
    dismissed_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "meeting_id",
            "user_id",
            name="uq_feedback_dismissals_meeting_user",
        ),
    )
