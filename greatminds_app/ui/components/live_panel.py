"""Component for the live round: question, answer cloud, controls and results."""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from greatminds_app.constants.ui_constants import (
    GAME_FINISHED_MESSAGE,
    JOIN_URL_PLACEHOLDER,
    LIVE_END_BUTTON,
    LIVE_NEW_ROUND_BUTTON,
    LIVE_NEXT_BUTTON,
    LIVE_POSITION_TEMPLATE,
    LIVE_RESPONSES_TEMPLATE,
    LIVE_REVEAL_BUTTON,
)
from greatminds_app.core.errors import GameError
from greatminds_app.core.game_manager import GameManager
from greatminds_app.core.markdown_renderer import renderer
from greatminds_app.core.models import SessionStatus
from greatminds_app.styling.styles import Styles
from greatminds_app.ui.components.answer_cloud import AnswerCloudWidget
from greatminds_app.ui.dialog_helpers import show_error, show_info

logger = logging.getLogger(__name__)


class LivePanel(QWidget):
    """UI component for running a live session."""

    def __init__(
        self,
        game_manager: GameManager,
        on_new_round: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.game_manager = game_manager
        self.on_new_round = on_new_round

        self._game_font_size: int = 14
        self._scoreboard_size: int = 3
        self._rendered_question: str | None = None
        self._announced_finish = False
        self._results_snapshot: tuple = ()

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        # Join link
        self.join_label = QLabel(f"Join at: {JOIN_URL_PLACEHOLDER}", self)
        self.join_label.setWordWrap(True)
        self.join_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self.join_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.join_label)

        # Position and question
        header_row = QHBoxLayout()
        self.position_label = QLabel("", self)
        self.position_label.setStyleSheet(Styles.get_secondary_text_style())
        header_row.addWidget(self.position_label)
        header_row.addStretch()
        self.responses_label = QLabel(LIVE_RESPONSES_TEMPLATE.format(count=0, suffix="s"), self)
        header_row.addWidget(self.responses_label)
        layout.addLayout(header_row)

        self.question_label = QLabel("", self)
        self.question_label.setTextFormat(Qt.RichText)
        self.question_label.setWordWrap(True)
        self.question_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.question_label)

        # Cloud and results
        body_row = QHBoxLayout()
        self.cloud = AnswerCloudWidget(self)
        body_row.addWidget(self.cloud, stretch=3)

        side_column = QVBoxLayout()
        self.results_group = QGroupBox("Results", self)
        self.results_layout = QVBoxLayout()
        self.results_group.setLayout(self.results_layout)
        self.results_group.setVisible(False)
        side_column.addWidget(self.results_group)

        self.scoreboard_group = QGroupBox(self)
        self.scoreboard_layout = QVBoxLayout()
        self.scoreboard_group.setLayout(self.scoreboard_layout)
        side_column.addWidget(self.scoreboard_group)
        side_column.addStretch()

        side_widget = QWidget(self)
        side_widget.setLayout(side_column)
        side_widget.setMinimumWidth(240)
        body_row.addWidget(side_widget, stretch=1)
        layout.addLayout(body_row, stretch=1)

        self.result_labels: list[QLabel] = []
        self.scoreboard_labels: list[QLabel] = []

        # Controls
        button_row = QHBoxLayout()
        self.new_round_button = QPushButton(LIVE_NEW_ROUND_BUTTON, self)
        self.new_round_button.clicked.connect(self.on_new_round)
        button_row.addWidget(self.new_round_button)
        button_row.addStretch()

        self.reveal_button = QPushButton(LIVE_REVEAL_BUTTON, self)
        self.reveal_button.setStyleSheet(Styles.get_primary_button_style())
        self.reveal_button.clicked.connect(self._handle_reveal)
        button_row.addWidget(self.reveal_button)

        self.next_button = QPushButton(LIVE_NEXT_BUTTON, self)
        self.next_button.clicked.connect(self._handle_next)
        button_row.addWidget(self.next_button)

        self.end_button = QPushButton(LIVE_END_BUTTON, self)
        self.end_button.clicked.connect(self._handle_end)
        button_row.addWidget(self.end_button)

        layout.addLayout(button_row)

        self._rebuild_scoreboard_labels()

    def start_session(self) -> None:
        self._rendered_question = None
        self._results_snapshot = ()
        self._announced_finish = False
        self.cloud.clear()
        self.results_group.setVisible(False)
        self.refresh()

    def stop_session(self) -> None:
        self._rendered_question = None
        self._results_snapshot = ()
        self.cloud.clear()
        self.results_group.setVisible(False)

    def teardown(self) -> None:
        self.cloud.teardown()

    def refresh(self) -> None:
        """Pull store notifications and redraw everything that depends on them."""
        try:
            self.game_manager.refresh()
        except GameError as exc:
            logger.warning("Could not apply store notifications: %s", exc)

        status = self.game_manager.get_status()
        join_url = self.game_manager.get_join_url()
        self.join_label.setText(f"Join at: {join_url or JOIN_URL_PLACEHOLDER}")

        number, total = self.game_manager.get_question_position()
        self.position_label.setText(
            LIVE_POSITION_TEMPLATE.format(number=number, total=total) if total else ""
        )
        count = self.game_manager.get_answer_count()
        self.responses_label.setText(
            LIVE_RESPONSES_TEMPLATE.format(count=count, suffix="" if count == 1 else "s")
        )

        question = self.game_manager.get_current_question()
        if question != self._rendered_question:
            self._rendered_question = question
            self.question_label.setText(renderer.render_fragment(question or ""))

        revealed = status in (SessionStatus.REVEALED, SessionStatus.FINISHED)
        self.cloud.set_groups(self.game_manager.get_groups())
        self.cloud.set_revealed(revealed)

        self.reveal_button.setEnabled(self.game_manager.can_reveal())
        self.next_button.setEnabled(self.game_manager.can_advance())
        self.next_button.setText(
            f"{LIVE_NEXT_BUTTON} ({self.game_manager.get_remaining_question_count()} left)"
        )
        self.end_button.setEnabled(self.game_manager.can_end())

        self._update_results_view(revealed)
        self._update_scoreboard_view()

        if status == SessionStatus.FINISHED and not self._announced_finish:
            self._announced_finish = True
            show_info(self, "Game over", GAME_FINISHED_MESSAGE, font_point_size=self._game_font_size)

    def set_game_font_size(self, size: int) -> None:
        self.apply_font_size(size)

    def set_scoreboard_size(self, size: int) -> None:
        self._scoreboard_size = size
        self._rebuild_scoreboard_labels()
        self._update_scoreboard_view()

    def set_animate_reveal(self, enabled: bool) -> None:
        self.cloud.set_animate_reveal(enabled)

    def _handle_reveal(self) -> None:
        try:
            self.game_manager.reveal_answers()
        except GameError as exc:
            show_error(self, "Could not reveal", str(exc))
        self.refresh()

    def _handle_next(self) -> None:
        try:
            self.game_manager.advance_question()
        except GameError as exc:
            show_error(self, "Could not advance", str(exc))
        self.refresh()

    def _handle_end(self) -> None:
        try:
            self.game_manager.end_session()
        except GameError as exc:
            show_error(self, "Could not end the game", str(exc))
        self.refresh()

    def _update_results_view(self, revealed: bool) -> None:
        rows = self.game_manager.get_ranked_results() if revealed else []
        snapshot = (revealed, tuple(rows), self._game_font_size)
        if snapshot == self._results_snapshot:
            return
        self._results_snapshot = snapshot

        while self.results_layout.count():
            item = self.results_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        self.result_labels = []
        self.results_group.setVisible(revealed)
        if not revealed:
            return

        style = f"font-size: {self._game_font_size}pt;"
        for row in rows:
            points = f" · +{row.points}" if row.points else ""
            label = QLabel(f"{row.rank}. {row.display} ({row.count}){points}", self)
            label.setStyleSheet(style + (" font-weight: bold;" if row.is_winner else ""))
            self.results_layout.addWidget(label)
            self.result_labels.append(label)

    def _rebuild_scoreboard_labels(self) -> None:
        while self.scoreboard_layout.count():
            item = self.scoreboard_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()

        self.scoreboard_labels = []
        for idx in range(self._scoreboard_size):
            label = QLabel(f"{idx + 1}. —", self)
            label.setAlignment(Qt.AlignLeft)
            self.scoreboard_layout.addWidget(label)
            self.scoreboard_labels.append(label)

        self.scoreboard_group.setTitle(f"Top {self._scoreboard_size} named players")
        self.apply_font_size(self._game_font_size)

    def _update_scoreboard_view(self) -> None:
        entries = self.game_manager.get_top_scorers(self._scoreboard_size)
        # Only named players are ranked; browser players join anonymously.
        self.scoreboard_group.setVisible(bool(entries))
        for idx, label in enumerate(self.scoreboard_labels):
            if idx < len(entries):
                entry = entries[idx]
                label.setText(f"{idx + 1}. {entry.participant_name} · {entry.total_points} pts")
            else:
                label.setText(f"{idx + 1}. —")

    def apply_font_size(self, font_size: int) -> None:
        self._game_font_size = font_size

        game_label_style = f"font-size: {font_size}pt;"
        self.join_label.setStyleSheet(f"font-size: {font_size}pt; font-weight: bold;")
        self.question_label.setStyleSheet(f"font-size: {font_size + 6}pt; font-weight: bold;")
        self.responses_label.setStyleSheet(game_label_style)
        for button in (self.reveal_button, self.next_button, self.end_button, self.new_round_button):
            button.setStyleSheet(game_label_style)
        self.reveal_button.setStyleSheet(Styles.get_primary_button_style() + f" QPushButton {{ {game_label_style} }}")

        for label in self.scoreboard_labels:
            label.setStyleSheet(game_label_style)
        for label in self.result_labels:
            label.setStyleSheet(game_label_style)
        self.scoreboard_group.setStyleSheet(f"font-size: {font_size}pt; font-weight: bold;")
        self.cloud.set_font_size(max(10, font_size - 2))
