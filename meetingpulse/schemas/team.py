# meetingpulse/schemas/team.py
from pydantic import BaseModel, Field


class TeamBase(BaseModel):
    """
    Shared fields used by TeamCreate and TeamRead.
    """

    name: str = Field(
        ...,
        min_length=1,
        description="Human-readable team name.",
        example="Engineering",
    )
    slug: str = Field(
        ...,
        min_length=1,
        description="Short unique key for the team (used in URLs).",
        example="engineering",
    )
    department_id: str | None = Field(
        default=None,
        description="Owning department, if any.",
        example="dept-eng",
    )


class TeamCreate(TeamBase):
    id: str | None = Field(
        default=None,
        description="Optional explicit identifier; generated when omitted.",
        example="team-eng",
    )


class TeamRead(TeamBase):
    id: str = Field(..., example="team-eng")

    class Config:
        from_attributes = True
