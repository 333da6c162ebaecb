"""Component where the host types the question list for a new round."""

from __future__ import annotations

from typing import Callable

from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from greatminds_app.constants.ui_constants import (
    LAUNCH_BUTTON,
    PLACEHOLDER_QUESTIONS,
    SETUP_SUBTITLE,
    SETUP_TITLE,
)
from greatminds_app.styling.styles import Styles


class SetupPanel(QWidget):
    """UI component for entering questions and launching a session."""

    def __init__(
        self,
        on_launch: Callable[[list[str]], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_launch = on_launch
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel(SETUP_TITLE, self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        self.subtitle_label = QLabel(SETUP_SUBTITLE, self)
        self.subtitle_label.setStyleSheet(Styles.get_secondary_text_style())
        self.subtitle_label.setWordWrap(True)
        layout.addWidget(self.subtitle_label)

        self.question_input = QPlainTextEdit(self)
        self.question_input.setPlaceholderText(PLACEHOLDER_QUESTIONS)
        self.question_input.textChanged.connect(self._on_input_changed)
        layout.addWidget(self.question_input, stretch=1)

        # Status and launch
        action_row = QHBoxLayout()
        self.status_label = QLabel("No questions yet.", self)
        action_row.addWidget(self.status_label)
        action_row.addStretch()

        self.launch_button = QPushButton(LAUNCH_BUTTON, self)
        self.launch_button.setStyleSheet(Styles.get_primary_button_style())
        self.launch_button.setEnabled(False)
        self.launch_button.clicked.connect(self._handle_launch)
        action_row.addWidget(self.launch_button)

        layout.addLayout(action_row)

    def get_questions(self) -> list[str]:
        """Non-blank lines of the editor, trimmed, in order."""
        lines = self.question_input.toPlainText().splitlines()
        return [line.strip() for line in lines if line.strip()]

    def set_busy(self, busy: bool) -> None:
        self.launch_button.setEnabled(not busy and bool(self.get_questions()))
        self.question_input.setReadOnly(busy)

    def reset_state(self) -> None:
        self.set_busy(False)
        self._on_input_changed()

    def apply_font_size(self, font_size: int) -> None:
        style = f"font-size: {font_size}pt;"
        self.question_input.setStyleSheet(style)
        self.status_label.setStyleSheet(style)

    def _on_input_changed(self) -> None:
        count = len(self.get_questions())
        self.launch_button.setEnabled(count > 0)
        if count == 0:
            self.status_label.setText("No questions yet.")
        else:
            self.status_label.setText(f"{count} question{'s' if count != 1 else ''} ready.")

    def _handle_launch(self) -> None:
        questions = self.get_questions()
        if not questions:
            return
        self.on_launch(questions)
