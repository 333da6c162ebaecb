"""Service for accumulating participant points across questions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from greatminds_app.constants.game_constants import ANONYMOUS_PARTICIPANT_NAME
from greatminds_app.core.models import AnswerGroup, utc_now


@dataclass(slots=True)
class ScoreEntry:
    """Mutable scoreboard entry used internally."""

    participant_name: str
    total_points: int = 0
    winning_answers: int = 0
    rounds_played: int = 0
    last_updated: datetime = field(default_factory=utc_now)


@dataclass(slots=True)
class ScoreboardRow:
    """Immutable snapshot returned to consumers."""

    participant_name: str
    total_points: int
    winning_answers: int
    rounds_played: int


class Scoreboard:
    """Tracks total points per named participant for one session.

    Answers sent under the anonymous default name are not credited: the
    players behind them cannot be told apart.
    """

    def __init__(self) -> None:
        self._scores: dict[str, ScoreEntry] = {}
        self._scored_rounds: set[int] = set()

    def record_round(self, question_index: int, groups: Iterable[AnswerGroup]) -> bool:
        """Award the points of one revealed question. Each question scores once."""
        if question_index in self._scored_rounds:
            return False
        self._scored_rounds.add(question_index)

        # A name answering more than once in a round still plays one round.
        best: dict[str, AnswerGroup] = {}
        for group in groups:
            for name in group.participants:
                if name == ANONYMOUS_PARTICIPANT_NAME:
                    continue
                current = best.get(name)
                if current is None or group.points > current.points:
                    best[name] = group

        now = utc_now()
        for name, group in best.items():
            entry = self._scores.get(name)
            if entry is None:
                entry = ScoreEntry(participant_name=name)
                self._scores[name] = entry
            entry.rounds_played += 1
            entry.total_points += group.points
            if group.is_winner:
                entry.winning_answers += 1
            entry.last_updated = now
        return True

    def get_top_scorers(self, limit: int = 3) -> list[ScoreboardRow]:
        """Return the top N participants by points, then by name."""
        sorted_entries = sorted(
            self._scores.values(),
            key=lambda e: (-e.total_points, e.participant_name),
        )

        return [
            ScoreboardRow(
                participant_name=entry.participant_name,
                total_points=entry.total_points,
                winning_answers=entry.winning_answers,
                rounds_played=entry.rounds_played,
            )
            for entry in sorted_entries[:limit]
        ]

    def get_points(self, participant_name: str) -> int:
        entry = self._scores.get(participant_name)
        return entry.total_points if entry else 0

    def clear(self) -> None:
        """Reset all scores."""
        self._scores.clear()
        self._scored_rounds.clear()
