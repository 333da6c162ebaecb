from greatminds_app.core.answer_aggregator import group_and_score
from greatminds_app.core.services.scoreboard import Scoreboard


def test_winners_collect_points_once_per_question():
    scoreboard = Scoreboard()
    groups = group_and_score([("Pepperoni", "ana"), ("pepperoni", "ben"), ("Mushroom", "cy")])

    assert scoreboard.record_round(0, groups) is True
    assert scoreboard.record_round(0, groups) is False

    assert scoreboard.get_points("ana") == 4
    assert scoreboard.get_points("ben") == 4
    assert scoreboard.get_points("cy") == 0
    assert scoreboard.get_points("nobody") == 0


def test_top_scorers_sorted_by_points_then_name():
    scoreboard = Scoreboard()
    scoreboard.record_round(0, group_and_score([("a", "zoe"), ("a", "max"), ("b", "lee")]))
    scoreboard.record_round(1, group_and_score([("c", "lee"), ("c", "zoe"), ("d", "max")]))

    rows = scoreboard.get_top_scorers(limit=3)

    assert [(row.participant_name, row.total_points) for row in rows] == [("zoe", 8), ("lee", 4), ("max", 4)]
    assert rows[0].winning_answers == 2
    assert rows[0].rounds_played == 2
    assert len(scoreboard.get_top_scorers(limit=1)) == 1


def test_clear_forgets_scores_and_rounds():
    scoreboard = Scoreboard()
    groups = group_and_score([("a", "zoe")])
    scoreboard.record_round(0, groups)

    scoreboard.clear()

    assert scoreboard.get_top_scorers() == []
    assert scoreboard.record_round(0, groups) is True


def test_rounds_count_once_per_name_and_anonymous_answers_are_not_credited():
    scoreboard = Scoreboard()
    groups = group_and_score(
        [
            ("Cats", "Anonymous"),
            ("cats", "Anonymous"),
            ("Cats", "zoe"),
            ("Dogs", "zoe"),
            ("Dogs", "Anonymous"),
        ]
    )

    scoreboard.record_round(0, groups)

    rows = scoreboard.get_top_scorers(limit=5)
    assert [(row.participant_name, row.total_points, row.rounds_played, row.winning_answers) for row in rows] == [
        ("zoe", 4, 1, 1)
    ]
    assert scoreboard.get_points("Anonymous") == 0


def test_only_anonymous_players_leave_the_scoreboard_empty():
    scoreboard = Scoreboard()
    scoreboard.record_round(0, group_and_score([("a", "Anonymous"), ("a", "Anonymous")]))

    assert scoreboard.get_top_scorers() == []
