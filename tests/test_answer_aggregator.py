from datetime import datetime, timedelta, timezone

from greatminds_app.constants.game_constants import WINNER_POINTS
from greatminds_app.core.answer_aggregator import (
    canonical_key,
    group_and_score,
    group_answers,
    ranked_results,
)
from greatminds_app.core.models import Answer


def _pairs(*texts: str) -> list[tuple[str, str]]:
    return [(text, f"player{index}") for index, text in enumerate(texts)]


def test_canonical_key_trims_and_folds_case():
    assert canonical_key("  PiZZa \n") == "pizza"
    assert canonical_key("   ") == ""


def test_blank_answers_never_form_a_group():
    groups = group_and_score(_pairs("Paris", " ", "paris", "PARIS ", ""))

    assert len(groups) == 1
    group = groups[0]
    assert group.key == "paris"
    assert group.display == "Paris"
    assert group.count == 3
    assert group.is_winner
    assert group.points == WINNER_POINTS
    assert group.participants == ["player0", "player2", "player3"]


def test_tied_groups_are_all_winners():
    groups = group_and_score(_pairs("A", "B", "a", "b", "C"))

    by_key = {group.key: group for group in groups}
    assert by_key["a"].is_winner and by_key["b"].is_winner
    assert not by_key["c"].is_winner
    assert by_key["c"].points == 0
    assert [group.key for group in groups] == ["a", "b", "c"]


def test_single_group_wins():
    groups = group_and_score(_pairs("A", "a", "A"))

    assert len(groups) == 1
    assert groups[0].is_winner
    assert groups[0].count == 3


def test_no_answers_gives_no_groups():
    assert group_and_score([]) == []
    assert group_and_score(_pairs(" ", "\t")) == []


def test_winners_first_then_by_descending_count():
    groups = group_and_score(_pairs("x", "y", "y", "z", "z", "z", "w"))

    assert [(group.key, group.count) for group in groups] == [("z", 3), ("y", 2), ("x", 1), ("w", 1)]
    assert [group.is_winner for group in groups] == [True, False, False, False]


def test_same_multiset_in_any_order_gives_same_counts_and_winners():
    first = group_and_score(_pairs("Dog", "cat", "dog", "Bird", "CAT", "dog"))
    second = group_and_score(_pairs("dog", "Bird", "CAT", "dog", "cat", "Dog"))

    def summary(groups):
        return {(group.key, group.count, group.is_winner, group.points) for group in groups}

    assert summary(first) == summary(second)
    assert [group.key for group in first][:1] == [group.key for group in second][:1] == ["dog"]


def test_group_answers_uses_stored_rows():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    answers = [
        Answer(id=str(i), session_id="s", participant_name=f"p{i}", answer=text, question_index=0,
               submitted_at=start + timedelta(seconds=i))
        for i, text in enumerate(["Pepperoni", "pepperoni ", "Mushroom"])
    ]

    groups = group_answers(answers)

    assert [(g.display, g.count, g.is_winner, g.points) for g in groups] == [
        ("Pepperoni", 2, True, 4),
        ("Mushroom", 1, False, 0),
    ]


def test_ranked_results_numbers_rows_and_honours_limit():
    groups = group_and_score(_pairs("a", "a", "b", "c"))

    rows = ranked_results(groups)
    assert [(row.rank, row.display, row.count) for row in rows] == [(1, "a", 2), (2, "b", 1), (3, "c", 1)]
    assert rows[0].is_winner and rows[0].points == WINNER_POINTS

    assert len(ranked_results(groups, limit=2)) == 2
