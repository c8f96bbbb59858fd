# meetingpulse/api/routes/teams.py
from datetime import date as date_type, datetime, timezone
from http import HTTPStatus
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.db.session import get_db
from meetingpulse.models.team import Team
from meetingpulse.schemas.insights import TeamInsights
from meetingpulse.schemas.team import TeamCreate, TeamRead
from meetingpulse.services.insights_service import compute_insights_for_team, get_team

router = APIRouter(prefix="/teams", tags=["Teams"])


@router.post(
    "",
    response_model=TeamRead,
    status_code=HTTPStatus.CREATED,
    summary="Register a team",
    description=(
        "Register a team whose meetings should be aggregated into weekly "
        "insights. Meetings are linked to a team through the `teamId` "
        "extended property of the calendar event."
    ),
    responses={
        400: {
            "description": "A team with the same id or slug already exists.",
            "content": {
                "application/json": {
                    "example": {"detail": "Team with slug 'engineering' already exists."}
                }
            },
        },
    },
)
async def create_team(
    payload: TeamCreate,
    db: AsyncSession = Depends(get_db),
) -> TeamRead:
    team_id = payload.id or f"team-{uuid4().hex[:12]}"

    existing_result = await db.execute(
        select(Team).where(or_(Team.slug == payload.slug, Team.id == team_id))
    )
    existing = existing_result.scalars().first()
    if existing is not None:
        field = "slug" if existing.slug == payload.slug else "id"
        value = payload.slug if field == "slug" else team_id
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail=f"Team with {field} '{value}' already exists.",
        )

    team = Team(
        id=team_id,
        name=payload.name,
        slug=payload.slug,
        department_id=payload.department_id,
    )
    db.add(team)
    await db.commit()
    await db.refresh(team)

    return TeamRead.model_validate(team)


@router.get(
    "",
    response_model=list[TeamRead],
    summary="List registered teams",
)
async def list_teams(
    department_id: str | None = Query(
        default=None,
        description="Only return teams belonging to this department.",
        example="dept-eng",
    ),
    db: AsyncSession = Depends(get_db),
) -> list[TeamRead]:
    stmt = select(Team)
    if department_id is not None:
        stmt = stmt.where(Team.department_id == department_id)

    result = await db.execute(stmt.order_by(Team.name.asc(), Team.id.asc()))
    return [TeamRead.model_validate(t) for t in result.scalars().all()]


@router.get(
    "/{team_id}",
    response_model=TeamRead,
    summary="Get a team by id",
    responses={404: {"description": "No team exists with the given id."}},
)
async def get_team_by_id(
    team_id: str = Path(..., description="Identifier of the team.", example="team-eng"),
    db: AsyncSession = Depends(get_db),
) -> TeamRead:
    team = await get_team(db, team_id)
    return TeamRead.model_validate(team)


@router.get(
    "/{team_id}/insights",
    response_model=TeamInsights,
    status_code=HTTPStatus.OK,
    summary="Weekly meeting insights for a team",
    description=(
        "Aggregate the team's meetings and feedback for one week.\n\n"
        "- `week_of` may be any date; it is moved back to the Monday of its "
        "week. Defaults to the current week.\n"
        "- Percentages are whole numbers; with no feedback they are all 0.\n"
        "- `best_day` / `worst_day` are weekday names by worth-it rate, or "
        "null when the week has no feedback.\n"
        "- Recurring series get a keep / review / cancel suggestion from the "
        "share of async votes."
    ),
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "team_id": "team-eng",
                        "team_name": "Engineering",
                        "week_of": "2025-11-10",
                        "total_meetings": 47,
                        "total_meeting_hours": 35.25,
                        "feedback_rate": 81,
                        "worth_it_rate": 42,
                        "async_suggestion_rate": 31,
                        "top_waste_reasons": [
                            {"reason": "no_agenda", "count": 6, "percentage": 40},
                            {"reason": "too_long", "count": 5, "percentage": 33},
                            {"reason": "wrong_people", "count": 4, "percentage": 27},
                        ],
                        "worst_day": "Tuesday",
                        "best_day": "Thursday",
                        "recurring_meeting_insights": [
                            {
                                "recurrence_id": "weekly-standup",
                                "meeting_title": "Weekly Standup",
                                "async_votes": 12,
                                "total_votes": 15,
                                "suggestion": "cancel",
                            }
                        ],
                    }
                }
            }
        },
        404: {"description": "No team exists with the given id."},
    },
)
async def get_team_insights(
    team_id: str = Path(..., description="Identifier of the team.", example="team-eng"),
    week_of: date_type | None = Query(
        default=None,
        description="Any date within the week to report on (YYYY-MM-DD).",
        example="2025-11-12",
    ),
    db: AsyncSession = Depends(get_db),
) -> TeamInsights:
    if week_of is None:
        week_of = datetime.now(tz=timezone.utc).date()
    return await compute_insights_for_team(db, team_id=team_id, week_of=week_of)
