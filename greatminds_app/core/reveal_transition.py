"""Time-based label opacities for the reveal animation of the answer cloud.

This is purely visual and never reads or writes node positions.
"""

from __future__ import annotations

from dataclasses import dataclass

BLOCK_OPACITY = 0.88
PLACEHOLDER_FADE_MS = 200.0
BLOCK_FADE_DELAY_MS = 100.0
BLOCK_FADE_MS = 500.0
LABEL_FADE_DELAY_MS = 300.0
LABEL_FADE_MS = 500.0
TOTAL_DURATION_MS = max(
    PLACEHOLDER_FADE_MS,
    BLOCK_FADE_DELAY_MS + BLOCK_FADE_MS,
    LABEL_FADE_DELAY_MS + LABEL_FADE_MS,
)


@dataclass(slots=True, frozen=True)
class LabelOpacities:
    placeholder: float
    block_fill: float
    answer_label: float


HIDDEN = LabelOpacities(placeholder=1.0, block_fill=BLOCK_OPACITY, answer_label=0.0)
SHOWN = LabelOpacities(placeholder=0.0, block_fill=0.0, answer_label=1.0)


def _progress(elapsed_ms: float, delay_ms: float, duration_ms: float) -> float:
    if elapsed_ms <= delay_ms:
        return 0.0
    return min(1.0, (elapsed_ms - delay_ms) / duration_ms)


def reveal_opacities(elapsed_ms: float) -> LabelOpacities:
    """Opacities ``elapsed_ms`` after the reveal signal was raised."""
    return LabelOpacities(
        placeholder=1.0 - _progress(elapsed_ms, 0.0, PLACEHOLDER_FADE_MS),
        block_fill=BLOCK_OPACITY * (1.0 - _progress(elapsed_ms, BLOCK_FADE_DELAY_MS, BLOCK_FADE_MS)),
        answer_label=_progress(elapsed_ms, LABEL_FADE_DELAY_MS, LABEL_FADE_MS),
    )


class RevealTransition:
    """Tracks the boolean reveal signal and when it was raised."""

    def __init__(self) -> None:
        self._revealed = False
        self._started_at_ms: float | None = None

    @property
    def revealed(self) -> bool:
        return self._revealed

    def set_revealed(self, revealed: bool, now_ms: float, *, animate: bool = True) -> None:
        if revealed == self._revealed:
            return
        self._revealed = revealed
        if revealed and animate:
            self._started_at_ms = now_ms
        else:
            # Already revealed when first shown: jump to the final state.
            self._started_at_ms = None

    def opacities(self, now_ms: float) -> LabelOpacities:
        if not self._revealed:
            return HIDDEN
        if self._started_at_ms is None:
            return SHOWN
        return reveal_opacities(now_ms - self._started_at_ms)

    def is_animating(self, now_ms: float) -> bool:
        return (
            self._revealed
            and self._started_at_ms is not None
            and now_ms - self._started_at_ms < TOTAL_DURATION_MS
        )
