"""Widget that draws the force-directed answer cloud."""

from __future__ import annotations

import random
from typing import Sequence

from PySide6.QtCore import QElapsedTimer, QRectF, Qt, QTimer
from PySide6.QtGui import QColor, QFont, QPainter, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from greatminds_app.constants.game_constants import CLOUD_HEIGHT
from greatminds_app.constants.ui_constants import CLOUD_FRAME_INTERVAL_MS, LIVE_WAITING_FOR_ANSWERS
from greatminds_app.core.cloud_layout import CloudLayoutEngine, LayoutDriver, NodePlacement
from greatminds_app.core.models import AnswerGroup
from greatminds_app.core.reveal_transition import RevealTransition
from greatminds_app.styling.color_palette import ColorPalette, Theme

_INITIAL_WIDTH = 800
_CORNER_RADIUS = 14.0
_BLOCK_BACKGROUND_ALPHA = 0.35
_HIDDEN_LABEL = "?"


class AnswerCloudWidget(QWidget):
    """Paints one rounded block per answer group and drives the layout with a frame timer."""

    def __init__(self, parent: QWidget | None = None, rng: random.Random | None = None) -> None:
        super().__init__(parent)
        self.setMinimumHeight(CLOUD_HEIGHT)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)

        self._alive = True
        self._placements: list[NodePlacement] = []
        self._signature: tuple[tuple[str, str, int, bool], ...] = ()
        self._font_size = 14
        self._animate_reveal = True
        self._theme = Theme.DARK

        self._engine = CloudLayoutEngine(_INITIAL_WIDTH, CLOUD_HEIGHT, rng)
        self._driver = LayoutDriver(self._engine, self)
        self._reveal = RevealTransition()

        self._clock = QElapsedTimer()
        self._clock.start()

        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(CLOUD_FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)

    # --- RenderSurface ---

    def is_alive(self) -> bool:
        return self._alive

    def place_nodes(self, placements: Sequence[NodePlacement]) -> None:
        self._placements = list(placements)
        self.update()

    # --- Public API ---

    def set_groups(self, groups: Sequence[AnswerGroup]) -> None:
        """Restart the layout when the set of groups or their counts changed."""
        if not self._alive:
            return
        signature = tuple((group.key, group.display, group.count, group.is_winner) for group in groups)
        if signature == self._signature:
            return
        self._signature = signature
        self._driver.update_groups(groups)
        self._ensure_running()

    def set_revealed(self, revealed: bool) -> None:
        if not self._alive or revealed == self._reveal.revealed:
            return
        animate = self._animate_reveal and self.isVisible()
        self._reveal.set_revealed(revealed, self._now_ms(), animate=animate)
        self._ensure_running()
        self.update()

    def set_font_size(self, size: int) -> None:
        self._font_size = size
        self.update()

    def set_animate_reveal(self, enabled: bool) -> None:
        self._animate_reveal = enabled

    def clear(self) -> None:
        self._signature = ()
        self._driver.update_groups([])
        self._reveal.set_revealed(False, self._now_ms())
        self.update()

    def teardown(self) -> None:
        """Cancel any layout in flight; nothing is drawn after this."""
        self._alive = False
        self._driver.stop()
        self._frame_timer.stop()

    # --- Qt events ---

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        size = event.size()
        if not self._alive or size.width() <= 0 or size.height() <= 0:
            return
        self._driver.resize(size.width(), size.height())
        self._ensure_running()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), QColor(ColorPalette.CLOUD_BACKGROUND.get(self._theme)))

        font = QFont(painter.font())
        font.setPointSize(self._font_size)
        font.setBold(True)
        painter.setFont(font)

        if not self._placements:
            painter.setPen(QColor(ColorPalette.TEXT_SECONDARY.get(self._theme)))
            painter.drawText(self.rect(), Qt.AlignCenter, LIVE_WAITING_FOR_ANSWERS)
            painter.end()
            return

        opacities = self._reveal.opacities(self._now_ms())
        for placement in self._placements:
            rect = QRectF(
                placement.x - placement.width / 2,
                placement.y - placement.height / 2,
                placement.width,
                placement.height,
            )
            base = QColor(placement.color)

            background = QColor(base)
            background.setAlphaF(_BLOCK_BACKGROUND_ALPHA)
            painter.setPen(Qt.NoPen)
            painter.setBrush(background)
            painter.drawRoundedRect(rect, _CORNER_RADIUS, _CORNER_RADIUS)

            painter.setPen(QColor(ColorPalette.TEXT_PRIMARY.get(self._theme)))
            painter.setOpacity(opacities.answer_label)
            painter.drawText(
                rect,
                Qt.AlignCenter | Qt.TextWordWrap,
                f"{placement.display}\n×{placement.count}",
            )
            painter.setOpacity(1.0)

            if opacities.block_fill > 0:
                cover = QColor(base)
                cover.setAlphaF(opacities.block_fill)
                painter.setPen(Qt.NoPen)
                painter.setBrush(cover)
                painter.drawRoundedRect(rect, _CORNER_RADIUS, _CORNER_RADIUS)

            if opacities.placeholder > 0:
                painter.setOpacity(opacities.placeholder)
                painter.setPen(QColor(ColorPalette.CLOUD_PLACEHOLDER_TEXT.get(self._theme)))
                painter.drawText(rect, Qt.AlignCenter, _HIDDEN_LABEL)
                painter.setOpacity(1.0)

            if placement.is_winner and self._reveal.revealed:
                painter.setPen(QPen(QColor(ColorPalette.WINNER_OUTLINE.get(self._theme)), 3))
                painter.setBrush(Qt.NoBrush)
                painter.drawRoundedRect(rect, _CORNER_RADIUS, _CORNER_RADIUS)

        painter.end()

    # --- Internals ---

    def _now_ms(self) -> float:
        return float(self._clock.elapsed())

    def _ensure_running(self) -> None:
        if self._alive and not self._frame_timer.isActive():
            self._frame_timer.start()

    def _on_frame(self) -> None:
        running = self._driver.step()
        animating = self._reveal.is_animating(self._now_ms())
        if animating:
            self.update()
        if not running and not animating:
            self._frame_timer.stop()
            self.update()
