import pytest

from greatminds_app.core.reveal_transition import (
    BLOCK_OPACITY,
    HIDDEN,
    SHOWN,
    TOTAL_DURATION_MS,
    RevealTransition,
    reveal_opacities,
)


def test_opacities_start_hidden_and_end_shown():
    assert reveal_opacities(0) == HIDDEN
    assert reveal_opacities(TOTAL_DURATION_MS) == SHOWN
    assert reveal_opacities(TOTAL_DURATION_MS * 3) == SHOWN


def test_label_and_block_fades_are_delayed():
    early = reveal_opacities(100)
    assert early.placeholder == pytest.approx(0.5)
    assert early.block_fill == pytest.approx(BLOCK_OPACITY)
    assert early.answer_label == 0.0

    middle = reveal_opacities(350)
    assert middle.placeholder == 0.0
    assert middle.block_fill == pytest.approx(BLOCK_OPACITY * 0.5)
    assert middle.answer_label == pytest.approx(0.1)


def test_transition_animates_from_the_moment_it_is_raised():
    transition = RevealTransition()
    assert transition.opacities(1000) == HIDDEN
    assert not transition.is_animating(1000)

    transition.set_revealed(True, now_ms=1000)

    assert transition.revealed
    assert transition.is_animating(1200)
    assert transition.opacities(1000) == HIDDEN
    assert transition.opacities(1000 + TOTAL_DURATION_MS) == SHOWN
    assert not transition.is_animating(1000 + TOTAL_DURATION_MS)


def test_repeated_signal_does_not_restart_the_animation():
    transition = RevealTransition()
    transition.set_revealed(True, now_ms=0)
    transition.set_revealed(True, now_ms=700)

    assert transition.opacities(800) == SHOWN


def test_without_animation_jumps_to_final_state_and_hides_again():
    transition = RevealTransition()
    transition.set_revealed(True, now_ms=0, animate=False)
    assert transition.opacities(0) == SHOWN
    assert not transition.is_animating(0)

    transition.set_revealed(False, now_ms=10)
    assert transition.opacities(10) == HIDDEN
