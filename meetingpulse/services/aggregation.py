# meetingpulse/services/aggregation.py
from __future__ import annotations

import calendar
import math
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, timedelta, timezone, tzinfo
from fractions import Fraction

from meetingpulse.core.errors import AggregationInputError
from meetingpulse.schemas.feedback import Feedback, FeedbackValue
from meetingpulse.schemas.insights import (
    MeetingStats,
    RecurringMeetingInsight,
    RecurringSuggestion,
    TeamInsights,
    WasteReasonStat,
)
from meetingpulse.schemas.meeting import Meeting

CANCEL_THRESHOLD = Fraction(66, 100)
KEEP_THRESHOLD = Fraction(20, 100)


def round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def percentage(part: int, whole: int) -> int:
    """
    round(100 * part / whole), halves rounded up; 0 when whole is 0.
    """
    if whole <= 0:
        return 0
    return round_half_up(Fraction(100 * part, whole))


def apportion_percentages(counts: Sequence[int]) -> list[int]:
    """
    Split 100 across `counts` with the largest-remainder method.

    Every share is the exact percentage rounded down or up, and the shares
    add up to exactly 100. Leftover points go to the largest remainders,
    earlier positions first on ties.
    """
    total = sum(counts)
    if total <= 0:
        return [0 for _ in counts]

    exact = [Fraction(100 * c, total) for c in counts]
    shares = [math.floor(q) for q in exact]
    leftover = 100 - sum(shares)

    order = sorted(range(len(counts)), key=lambda i: (-(exact[i] - shares[i]), i))
    for i in order[:leftover]:
        shares[i] += 1
    return shares


def suggest_for_series(async_votes: int, total_votes: int) -> RecurringSuggestion:
    """
    cancel at >= 66% async votes, keep at <= 20%, review in between.
    """
    ratio = Fraction(async_votes, total_votes)
    if ratio >= CANCEL_THRESHOLD:
        return RecurringSuggestion.CANCEL
    if ratio <= KEEP_THRESHOLD:
        return RecurringSuggestion.KEEP
    return RecurringSuggestion.REVIEW


def _validate_population(
    meetings: Iterable[Meeting],
    feedback: Iterable[Feedback],
) -> tuple[dict[str, Meeting], list[Feedback]]:
    by_id: dict[str, Meeting] = {}
    for meeting in meetings:
        if meeting.end_time <= meeting.start_time:
            raise AggregationInputError(
                f"Meeting {meeting.id} has end_time <= start_time."
            )
        if meeting.id in by_id:
            raise AggregationInputError(f"Meeting {meeting.id} appears more than once.")
        by_id[meeting.id] = meeting

    items = list(feedback)
    for fb in items:
        if fb.meeting_id not in by_id:
            raise AggregationInputError(
                f"Feedback {fb.id} references unknown meeting {fb.meeting_id}."
            )
    return by_id, items


def _value_counts(feedback: Iterable[Feedback]) -> Counter:
    counts: Counter = Counter()
    for fb in feedback:
        counts[fb.value] += 1
    return counts


def compute_meeting_stats(
    meetings: Iterable[Meeting],
    feedback: Iterable[Feedback],
) -> MeetingStats:
    """
    Aggregate a meeting population and its feedback into MeetingStats.

    With no feedback every percentage is 0; with no meetings the average
    duration and recurring share are 0 as well.
    """
    by_id, items = _validate_population(meetings, feedback)
    population = list(by_id.values())

    total_meetings = len(population)
    total_feedback = len(items)
    counts = _value_counts(items)

    if total_meetings:
        avg_duration = round(
            sum(m.duration_minutes for m in population) / total_meetings, 2
        )
    else:
        avg_duration = 0.0

    recurring = sum(1 for m in population if m.is_recurring)

    return MeetingStats(
        total_meetings=total_meetings,
        total_feedback=total_feedback,
        worth_it_percentage=percentage(counts[FeedbackValue.WORTH_IT], total_feedback),
        async_percentage=percentage(counts[FeedbackValue.ASYNC], total_feedback),
        waste_percentage=percentage(counts[FeedbackValue.WASTE], total_feedback),
        avg_meeting_duration=avg_duration,
        recurring_meeting_percentage=percentage(recurring, total_meetings),
    )


def start_of_week(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def _top_waste_reasons(
    feedback: Iterable[Feedback],
    include_async_reasons: bool,
) -> list[WasteReasonStat]:
    values = {FeedbackValue.WASTE}
    if include_async_reasons:
        values.add(FeedbackValue.ASYNC)

    counts: Counter = Counter(
        fb.reason for fb in feedback if fb.value in values and fb.reason is not None
    )
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0].value))
    shares = apportion_percentages([count for _, count in ranked])

    return [
        WasteReasonStat(reason=reason, count=count, percentage=share)
        for (reason, count), share in zip(ranked, shares)
    ]


def _best_and_worst_day(
    feedback: Iterable[Feedback],
    by_id: dict[str, Meeting],
    tz: tzinfo,
) -> tuple[str | None, str | None]:
    worth_it: Counter = Counter()
    totals: Counter = Counter()
    for fb in feedback:
        weekday = by_id[fb.meeting_id].start_time.astimezone(tz).weekday()
        totals[weekday] += 1
        if fb.value == FeedbackValue.WORTH_IT:
            worth_it[weekday] += 1

    if not totals:
        return None, None

    rates = {day: Fraction(worth_it[day], totals[day]) for day in sorted(totals)}
    # min/max keep the first of equal keys, and days are iterated Monday-first.
    best = max(rates, key=lambda day: rates[day])
    worst = min(rates, key=lambda day: rates[day])
    return calendar.day_name[best], calendar.day_name[worst]


def _recurring_insights(
    meetings: Iterable[Meeting],
    feedback: Iterable[Feedback],
) -> list[RecurringMeetingInsight]:
    series: dict[str, list[Meeting]] = defaultdict(list)
    for meeting in meetings:
        if meeting.is_recurring and meeting.recurrence_id:
            series[meeting.recurrence_id].append(meeting)

    group_of = {m.id: rid for rid, members in series.items() for m in members}
    async_votes: Counter = Counter()
    total_votes: Counter = Counter()
    for fb in feedback:
        rid = group_of.get(fb.meeting_id)
        if rid is None:
            continue
        total_votes[rid] += 1
        if fb.value == FeedbackValue.ASYNC:
            async_votes[rid] += 1

    insights: list[RecurringMeetingInsight] = []
    for rid, members in series.items():
        total = total_votes[rid]
        if total == 0:
            continue
        label = min(members, key=lambda m: (m.start_time, m.id)).title
        insights.append(
            RecurringMeetingInsight(
                recurrence_id=rid,
                meeting_title=label,
                async_votes=async_votes[rid],
                total_votes=total,
                suggestion=suggest_for_series(async_votes[rid], total),
            )
        )

    insights.sort(key=lambda i: (-i.total_votes, i.meeting_title, i.recurrence_id))
    return insights


def compute_team_insights(
    team_id: str,
    team_name: str,
    week_start: date,
    meetings: Iterable[Meeting],
    feedback: Iterable[Feedback],
    tz: tzinfo = timezone.utc,
    include_async_reasons: bool = False,
) -> TeamInsights:
    """
    Fold one team's meetings and feedback for a week into TeamInsights.

    Scope
    -----
    Only meetings owned by `team_id` whose start (in `tz`) falls inside
    [week_start, week_start + 7 days) are counted, and only feedback for
    those meetings. `week_start` is moved back to its Monday.

    Notes
    -----
    - top_waste_reasons counts 'waste' feedback only unless
      `include_async_reasons` is set. Feedback without a reason cannot be
      attributed and is left out of the percentages.
    - best_day / worst_day only consider weekdays that received feedback.
    """
    by_id, items = _validate_population(meetings, feedback)

    week_of = start_of_week(week_start)
    week_end = week_of + timedelta(days=7)

    scoped = {
        mid: m
        for mid, m in by_id.items()
        if m.team_id == team_id
        and week_of <= m.start_time.astimezone(tz).date() < week_end
    }
    scoped_feedback = [fb for fb in items if fb.meeting_id in scoped]

    total_meetings = len(scoped)
    total_feedback = len(scoped_feedback)
    counts = _value_counts(scoped_feedback)
    total_minutes = sum(m.duration_minutes for m in scoped.values())

    best_day, worst_day = _best_and_worst_day(scoped_feedback, scoped, tz)

    return TeamInsights(
        team_id=team_id,
        team_name=team_name,
        week_of=week_of,
        total_meetings=total_meetings,
        total_meeting_hours=round(total_minutes / 60, 2),
        feedback_rate=percentage(total_feedback, total_meetings),
        worth_it_rate=percentage(counts[FeedbackValue.WORTH_IT], total_feedback),
        async_suggestion_rate=percentage(counts[FeedbackValue.ASYNC], total_feedback),
        top_waste_reasons=_top_waste_reasons(scoped_feedback, include_async_reasons),
        worst_day=worst_day,
        best_day=best_day,
        recurring_meeting_insights=_recurring_insights(scoped.values(), scoped_feedback),
    )
