"""Case-insensitive grouping of free-text answers, winner selection and scoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from greatminds_app.constants.game_constants import WINNER_POINTS
from greatminds_app.core.models import Answer, AnswerGroup


@dataclass(slots=True, frozen=True)
class ResultRow:
    """One line of the post-reveal results table."""

    rank: int
    display: str
    count: int
    points: int
    is_winner: bool


def canonical_key(text: str) -> str:
    """Trimmed, case-folded form used to group equivalent answers."""
    return text.strip().casefold()


def group_and_score(answers: Iterable[tuple[str, str]]) -> list[AnswerGroup]:
    """Group ``(answer_text, participant_name)`` pairs and mark the winner(s).

    Blank answers are skipped. The display text of a group is the trimmed
    text of the first answer seen for its key. Every group whose count equals
    the maximum count wins ``WINNER_POINTS``; the result lists winners first,
    then the rest by descending count, keeping encounter order among ties.
    """
    groups: dict[str, AnswerGroup] = {}
    for text, participant_name in answers:
        key = canonical_key(text)
        if not key:
            continue
        group = groups.get(key)
        if group is None:
            groups[key] = AnswerGroup(
                key=key,
                display=text.strip(),
                count=1,
                participants=[participant_name],
            )
        else:
            group.count += 1
            group.participants.append(participant_name)

    max_count = max((group.count for group in groups.values()), default=0)
    for group in groups.values():
        group.is_winner = max_count > 0 and group.count == max_count
        group.points = WINNER_POINTS if group.is_winner else 0

    return sorted(groups.values(), key=lambda g: (not g.is_winner, -g.count))


def group_answers(answers: Iterable[Answer]) -> list[AnswerGroup]:
    """Convenience wrapper for stored ``Answer`` rows."""
    return group_and_score((answer.answer, answer.participant_name) for answer in answers)


def ranked_results(groups: Iterable[AnswerGroup], limit: int | None = None) -> list[ResultRow]:
    rows = [
        ResultRow(
            rank=position,
            display=group.display,
            count=group.count,
            points=group.points,
            is_winner=group.is_winner,
        )
        for position, group in enumerate(groups, start=1)
    ]
    if limit is not None:
        return rows[:limit]
    return rows
