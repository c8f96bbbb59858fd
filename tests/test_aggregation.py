# tests/test_aggregation.py
from datetime import date, timedelta, timezone

import pytest

from meetingpulse.core.errors import AggregationInputError
from meetingpulse.schemas.feedback import FeedbackReason
from meetingpulse.schemas.insights import RecurringSuggestion
from meetingpulse.schemas.meeting import Meeting
from meetingpulse.services.aggregation import (
    apportion_percentages,
    compute_meeting_stats,
    compute_team_insights,
    percentage,
    suggest_for_series,
)

from factories import WEEK_START, make_feedback, make_meeting


def _day(offset: int, hour: int = 9):
    return WEEK_START + timedelta(days=offset, hours=hour)


# ---------------------------------------------------------------------------
# MeetingStats
# ---------------------------------------------------------------------------

def test_meeting_stats_percentages_and_averages():
    meetings = [
        make_meeting("m1", minutes=30, is_recurring=True, recurrence_id="r1"),
        make_meeting("m2", start=_day(1), minutes=45, is_recurring=True, recurrence_id="r2"),
        make_meeting("m3", start=_day(2), minutes=60),
    ]
    feedback = [
        make_feedback("m1", "worth_it"),
        make_feedback("m1", "worth_it"),
        make_feedback("m2", "async", "could_be_email"),
        make_feedback("m3", "waste", "no_agenda"),
    ]

    stats = compute_meeting_stats(meetings, feedback)

    assert stats.total_meetings == 3
    assert stats.total_feedback == 4
    assert stats.worth_it_percentage == 50
    assert stats.async_percentage == 25
    assert stats.waste_percentage == 25
    assert stats.avg_meeting_duration == 45.0
    # 2 of 3 meetings recurring -> 66.67 -> 67
    assert stats.recurring_meeting_percentage == 67


def test_meeting_stats_without_feedback_is_all_zero():
    stats = compute_meeting_stats([make_meeting("m1")], [])

    assert stats.total_feedback == 0
    assert stats.worth_it_percentage == 0
    assert stats.async_percentage == 0
    assert stats.waste_percentage == 0
    assert stats.avg_meeting_duration == 30.0


def test_meeting_stats_on_empty_population():
    stats = compute_meeting_stats([], [])

    assert stats.total_meetings == 0
    assert stats.avg_meeting_duration == 0.0
    assert stats.recurring_meeting_percentage == 0


def test_bucket_percentages_sum_to_100_within_rounding():
    meeting = make_meeting("m1")
    for worth_it in range(0, 6):
        for async_ in range(0, 6):
            for waste in range(0, 6):
                if worth_it + async_ + waste == 0:
                    continue
                feedback = (
                    [make_feedback("m1", "worth_it") for _ in range(worth_it)]
                    + [make_feedback("m1", "async") for _ in range(async_)]
                    + [make_feedback("m1", "waste") for _ in range(waste)]
                )
                stats = compute_meeting_stats([meeting], feedback)
                total = stats.worth_it_percentage + stats.async_percentage + stats.waste_percentage
                assert 99 <= total <= 101


def test_percentage_rounds_halves_up():
    assert percentage(1, 8) == 13  # 12.5
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(5, 0) == 0


def test_apportion_always_sums_to_100():
    shares = apportion_percentages([1, 1, 3, 3])  # 12.5, 12.5, 37.5, 37.5

    assert sum(shares) == 100
    assert apportion_percentages([]) == []
    assert apportion_percentages([0, 0]) == [0, 0]


def test_meeting_with_end_before_start_is_rejected():
    broken = Meeting.model_construct(
        **make_meeting("m-bad").model_dump(exclude={"end_time"}),
        end_time=WEEK_START,
    )

    with pytest.raises(AggregationInputError):
        compute_meeting_stats([broken], [])


def test_feedback_for_unknown_meeting_is_rejected():
    with pytest.raises(AggregationInputError):
        compute_meeting_stats([make_meeting("m1")], [make_feedback("m-unknown", "waste")])


def test_duplicate_meeting_ids_are_rejected():
    with pytest.raises(AggregationInputError):
        compute_meeting_stats([make_meeting("m1"), make_meeting("m1")], [])


# ---------------------------------------------------------------------------
# Recurring series suggestion
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "async_votes,total_votes,expected",
    [
        (7, 10, RecurringSuggestion.CANCEL),
        (33, 50, RecurringSuggestion.CANCEL),  # exactly 0.66
        (12, 15, RecurringSuggestion.CANCEL),
        (3, 20, RecurringSuggestion.KEEP),  # 0.15
        (1, 5, RecurringSuggestion.KEEP),  # exactly 0.20
        (0, 4, RecurringSuggestion.KEEP),
        (2, 5, RecurringSuggestion.REVIEW),  # 0.4
        (13, 20, RecurringSuggestion.REVIEW),  # 0.65
    ],
)
def test_series_suggestion_thresholds(async_votes, total_votes, expected):
    assert suggest_for_series(async_votes, total_votes) == expected


# ---------------------------------------------------------------------------
# TeamInsights
# ---------------------------------------------------------------------------

def _team_population():
    meetings = [
        make_meeting("mon", start=_day(0), minutes=30),
        make_meeting("tue", start=_day(1), minutes=45),
        make_meeting("wed", start=_day(2), minutes=60),
        make_meeting("thu", start=_day(3), minutes=15),
        # Other team, same week
        make_meeting("other-team", start=_day(1), team_id="team-sales"),
        # Same team, following week
        make_meeting("next-week", start=_day(7)),
    ]
    feedback = [
        make_feedback("mon", "worth_it"),
        make_feedback("mon", "waste", "no_agenda"),
        make_feedback("tue", "worth_it"),
        make_feedback("wed", "async", "could_be_email"),
        make_feedback("wed", "waste", "too_long"),
        make_feedback("thu", "waste"),
        make_feedback("other-team", "waste", "wrong_people"),
        make_feedback("next-week", "waste", "wrong_people"),
    ]
    return meetings, feedback


def test_team_insights_scopes_to_team_and_week():
    meetings, feedback = _team_population()

    insights = compute_team_insights(
        team_id="team-eng",
        team_name="Engineering",
        week_start=date(2025, 11, 10),
        meetings=meetings,
        feedback=feedback,
    )

    assert insights.team_id == "team-eng"
    assert insights.team_name == "Engineering"
    assert insights.week_of == date(2025, 11, 10)
    assert insights.total_meetings == 4
    # 30 + 45 + 60 + 15 = 150 minutes
    assert insights.total_meeting_hours == 2.5
    # 6 answers for 4 meetings
    assert insights.feedback_rate == 150
    assert insights.worth_it_rate == 33
    assert insights.async_suggestion_rate == 17
    reasons = {r.reason for r in insights.top_waste_reasons}
    assert FeedbackReason.WRONG_PEOPLE not in reasons


def test_team_insights_week_of_is_moved_to_monday():
    meetings, feedback = _team_population()

    insights = compute_team_insights(
        "team-eng", "Engineering", date(2025, 11, 13), meetings, feedback
    )

    assert insights.week_of == date(2025, 11, 10)
    assert insights.total_meetings == 4


def test_best_and_worst_day_by_worth_it_rate():
    meetings, feedback = _team_population()

    insights = compute_team_insights(
        "team-eng", "Engineering", date(2025, 11, 10), meetings, feedback
    )

    # Mon 50%, Tue 100%, Wed 0%, Thu 0% -> worst tie goes to Wednesday
    assert insights.best_day == "Tuesday"
    assert insights.worst_day == "Wednesday"


def test_day_ties_resolve_to_earliest_weekday():
    meetings = [
        make_meeting("thu", start=_day(3)),
        make_meeting("mon", start=_day(0)),
    ]
    feedback = [make_feedback("thu", "worth_it"), make_feedback("mon", "worth_it")]

    insights = compute_team_insights("team-eng", "Eng", date(2025, 11, 10), meetings, feedback)

    assert insights.best_day == "Monday"
    assert insights.worst_day == "Monday"


def test_days_are_bucketed_in_the_report_timezone():
    """
    02:00 UTC on Tuesday is still Monday evening at UTC-5, and 03:00 UTC on
    the next Monday still belongs to the previous week there.
    """
    tz = timezone(timedelta(hours=-5))
    meetings = [
        make_meeting("late-monday", start=_day(1, hour=2)),
        make_meeting("late-sunday", start=_day(7, hour=3)),
    ]
    feedback = [make_feedback("late-monday", "worth_it"), make_feedback("late-sunday", "waste")]

    insights = compute_team_insights(
        "team-eng", "Eng", date(2025, 11, 10), meetings, feedback, tz=tz
    )

    assert insights.total_meetings == 2
    assert insights.best_day == "Monday"
    assert insights.worst_day == "Sunday"


def test_no_feedback_degrades_to_zero_rates():
    insights = compute_team_insights(
        "team-eng", "Eng", date(2025, 11, 10), [make_meeting("m1")], []
    )

    assert insights.total_meetings == 1
    assert insights.feedback_rate == 0
    assert insights.worth_it_rate == 0
    assert insights.async_suggestion_rate == 0
    assert insights.top_waste_reasons == []
    assert insights.best_day is None
    assert insights.worst_day is None
    assert insights.recurring_meeting_insights == []


def test_top_waste_reasons_ranking_and_percentages():
    meeting = make_meeting("m1")
    feedback = (
        [make_feedback("m1", "waste", "no_agenda") for _ in range(3)]
        + [make_feedback("m1", "waste", "wrong_people") for _ in range(2)]
        + [make_feedback("m1", "waste", "too_long") for _ in range(2)]
        + [make_feedback("m1", "waste")]  # no reason: not attributable
        + [make_feedback("m1", "async", "could_be_email") for _ in range(2)]
    )

    insights = compute_team_insights("team-eng", "Eng", date(2025, 11, 10), [meeting], feedback)
    top = [(r.reason.value, r.count, r.percentage) for r in insights.top_waste_reasons]

    # Ties on count are ordered by reason name
    assert top == [
        ("no_agenda", 3, 43),
        ("too_long", 2, 29),
        ("wrong_people", 2, 28),
    ]
    assert sum(p for _, _, p in top) == 100


def test_top_waste_reasons_can_include_async_feedback():
    meeting = make_meeting("m1")
    feedback = (
        [make_feedback("m1", "waste", "no_agenda") for _ in range(3)]
        + [make_feedback("m1", "async", "could_be_email") for _ in range(2)]
        + [make_feedback("m1", "async", "too_long") for _ in range(2)]
        + [make_feedback("m1", "waste", "wrong_people") for _ in range(2)]
    )

    insights = compute_team_insights(
        "team-eng",
        "Eng",
        date(2025, 11, 10),
        [meeting],
        feedback,
        include_async_reasons=True,
    )
    top = [(r.reason.value, r.count) for r in insights.top_waste_reasons]

    assert top == [
        ("no_agenda", 3),
        ("could_be_email", 2),
        ("too_long", 2),
        ("wrong_people", 2),
    ]
    assert sum(r.percentage for r in insights.top_waste_reasons) == 100
    counts = [r.count for r in insights.top_waste_reasons]
    assert counts == sorted(counts, reverse=True)


def test_recurring_meeting_insights_per_series():
    standup = [
        make_meeting(
            f"standup-{i}",
            start=_day(i),
            minutes=15,
            is_recurring=True,
            recurrence_id="standup-daily",
            title="Daily Standup",
        )
        for i in range(3)
    ]
    planning = make_meeting(
        "planning",
        start=_day(1, hour=14),
        is_recurring=True,
        recurrence_id="sprint-planning",
        title="Sprint Planning",
    )
    all_hands = make_meeting(
        "all-hands",
        start=_day(4),
        is_recurring=True,
        recurrence_id="all-hands",
        title="All Hands",
    )
    silent = make_meeting(
        "silent",
        start=_day(4, hour=15),
        is_recurring=True,
        recurrence_id="no-votes",
        title="Silent Series",
    )

    feedback = (
        # standup: 7 of 10 async -> cancel
        [make_feedback(f"standup-{i % 3}", "async") for i in range(7)]
        + [make_feedback("standup-0", "worth_it") for _ in range(3)]
        # planning: 3 of 20 async -> keep
        + [make_feedback("planning", "async") for _ in range(3)]
        + [make_feedback("planning", "worth_it") for _ in range(17)]
        # all hands: 2 of 5 async -> review
        + [make_feedback("all-hands", "async") for _ in range(2)]
        + [make_feedback("all-hands", "waste") for _ in range(3)]
    )

    insights = compute_team_insights(
        "team-eng",
        "Eng",
        date(2025, 11, 10),
        standup + [planning, all_hands, silent],
        feedback,
    )
    by_series = {i.recurrence_id: i for i in insights.recurring_meeting_insights}

    assert set(by_series) == {"standup-daily", "sprint-planning", "all-hands"}
    assert by_series["standup-daily"].meeting_title == "Daily Standup"
    assert by_series["standup-daily"].async_votes == 7
    assert by_series["standup-daily"].total_votes == 10
    assert by_series["standup-daily"].suggestion == RecurringSuggestion.CANCEL
    assert by_series["sprint-planning"].suggestion == RecurringSuggestion.KEEP
    assert by_series["all-hands"].suggestion == RecurringSuggestion.REVIEW
    # Most voted first
    assert [i.recurrence_id for i in insights.recurring_meeting_insights] == [
        "sprint-planning",
        "standup-daily",
        "all-hands",
    ]


def test_aggregation_is_deterministic():
    meetings, feedback = _team_population()

    first = compute_team_insights("team-eng", "Eng", date(2025, 11, 10), meetings, feedback)
    second = compute_team_insights(
        "team-eng", "Eng", date(2025, 11, 10), list(reversed(meetings)), list(reversed(feedback))
    )

    assert first == second
