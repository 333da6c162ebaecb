"""Settings dialog for host display preferences."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QSpinBox,
    QPushButton,
    QGroupBox,
    QCheckBox,
)


class SettingsDialog(QDialog):
    """Dialog for configuring font sizes, result rows and the reveal animation."""

    def __init__(
        self,
        parent=None,
        ui_font_size: int = 10,
        game_font_size: int = 14,
        scoreboard_size: int = 3,
        animate_reveal: bool = True,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setModal(True)
        self.setMinimumWidth(400)

        self._ui_font_size = ui_font_size
        self._game_font_size = game_font_size
        self._scoreboard_size = max(1, min(10, scoreboard_size))
        self._animate_reveal = animate_reveal

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        font_group = QGroupBox("Font Sizes")
        font_layout = QVBoxLayout()
        font_group.setLayout(font_layout)

        ui_font_row = QHBoxLayout()
        ui_font_label = QLabel("UI Font Size (buttons, question editor):")
        self.ui_font_spinbox = QSpinBox()
        self.ui_font_spinbox.setRange(8, 24)
        self.ui_font_spinbox.setValue(self._ui_font_size)
        self.ui_font_spinbox.setSuffix(" pt")
        ui_font_row.addWidget(ui_font_label)
        ui_font_row.addStretch()
        ui_font_row.addWidget(self.ui_font_spinbox)
        font_layout.addLayout(ui_font_row)

        game_font_row = QHBoxLayout()
        game_font_label = QLabel("Game Font Size (question, results):")
        game_font_label.setToolTip("Font size for the live screen: question, response count and rankings")
        self.game_font_spinbox = QSpinBox()
        self.game_font_spinbox.setRange(10, 32)
        self.game_font_spinbox.setValue(self._game_font_size)
        self.game_font_spinbox.setSuffix(" pt")
        game_font_row.addWidget(game_font_label)
        game_font_row.addStretch()
        game_font_row.addWidget(self.game_font_spinbox)
        font_layout.addLayout(game_font_row)

        layout.addWidget(font_group)

        display_group = QGroupBox("Display Settings")
        display_layout = QVBoxLayout()
        display_group.setLayout(display_layout)

        self.animate_checkbox = QCheckBox("Animate the reveal of answer labels")
        self.animate_checkbox.setChecked(self._animate_reveal)
        display_layout.addWidget(self.animate_checkbox)

        scoreboard_row = QHBoxLayout()
        scoreboard_label = QLabel("Scoreboard slots (top N):")
        scoreboard_label.setToolTip("Number of players shown in the running scoreboard.")
        self.scoreboard_spinbox = QSpinBox()
        self.scoreboard_spinbox.setRange(1, 10)
        self.scoreboard_spinbox.setValue(self._scoreboard_size)
        scoreboard_row.addWidget(scoreboard_label)
        scoreboard_row.addStretch()
        scoreboard_row.addWidget(self.scoreboard_spinbox)
        display_layout.addLayout(scoreboard_row)

        layout.addWidget(display_group)

        button_row = QHBoxLayout()
        button_row.addStretch()

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self.reject)  # type: ignore[arg-type]
        button_row.addWidget(self.cancel_button)

        self.apply_button = QPushButton("Apply")
        self.apply_button.clicked.connect(self.accept)  # type: ignore[arg-type]
        self.apply_button.setDefault(True)
        button_row.addWidget(self.apply_button)

        layout.addLayout(button_row)

    def get_ui_font_size(self) -> int:
        return self.ui_font_spinbox.value()

    def get_game_font_size(self) -> int:
        return self.game_font_spinbox.value()

    def get_scoreboard_size(self) -> int:
        """Get desired number of scoreboard slots."""
        return self.scoreboard_spinbox.value()

    def get_animate_reveal(self) -> bool:
        return self.animate_checkbox.isChecked()
