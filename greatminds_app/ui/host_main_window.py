"""Qt main window switching between question setup and the live round."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QHBoxLayout,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from greatminds_app.constants.about import (
    APP_ABOUT_TEXT,
    APP_LICENSE,
    APP_NAME,
    APP_VERSION,
    HELP_TEXT,
)
from greatminds_app.constants.ui_constants import ANSWER_REFRESH_INTERVAL_MS, WINDOW_TITLE
from greatminds_app.core.errors import GameError, ValidationError
from greatminds_app.core.game_manager import GameManager
from greatminds_app.core.models import SessionStatus
from greatminds_app.styling.styles import Styles
from greatminds_app.ui.components.live_panel import LivePanel
from greatminds_app.ui.components.setup_panel import SetupPanel
from greatminds_app.ui.dialog_helpers import confirm_new_round, show_error, show_info, show_warning
from greatminds_app.ui.settings_dialog import SettingsDialog


class HostMode(Enum):
    """High-level UI mode for the host console."""

    SETUP = auto()
    LIVE = auto()


class HostMainWindow(QMainWindow):
    """Main Qt window orchestrating setup and live modes."""

    def __init__(self, game_manager: GameManager) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.game_manager = game_manager
        self._mode = HostMode.SETUP

        self._ui_font_size: int = 10
        self._game_font_size: int = 14
        self._scoreboard_size: int = 3
        self._animate_reveal: bool = True

        self._build_ui()
        self._configure_refresh_timer()
        self._apply_styles()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_menu_buttons(root_layout)

        self.mode_stack = QStackedWidget(self)
        self.setup_panel = SetupPanel(on_launch=self._handle_launch, parent=self)
        self.live_panel = LivePanel(
            self.game_manager,
            on_new_round=self._handle_new_round,
            parent=self,
        )
        self.mode_stack.addWidget(self.setup_panel)
        self.mode_stack.addWidget(self.live_panel)
        root_layout.addWidget(self.mode_stack)

        self._set_mode(HostMode.SETUP)

    def _build_menu_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()
        button_row.addStretch()

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        self.settings_button = QPushButton("Settings", self)
        self.settings_button.clicked.connect(self._handle_settings)
        button_row.addWidget(self.settings_button)

        layout.addLayout(button_row)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(ANSWER_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_state)
        self.refresh_timer.start()

    def _refresh_state(self) -> None:
        if self._mode == HostMode.LIVE:
            self.live_panel.refresh()

    def _set_mode(self, mode: HostMode) -> None:
        self._mode = mode
        index_map = {
            HostMode.SETUP: 0,
            HostMode.LIVE: 1,
        }
        self.mode_stack.setCurrentIndex(index_map[mode])

    def _handle_launch(self, questions: list[str]) -> None:
        self.setup_panel.set_busy(True)
        try:
            self.game_manager.launch_session(questions)
        except ValidationError as exc:
            show_warning(self, "No questions", str(exc))
            return
        except GameError as exc:
            show_error(self, "Launch failed", str(exc))
            return
        finally:
            self.setup_panel.set_busy(False)

        self._set_mode(HostMode.LIVE)
        self.live_panel.start_session()

    def _handle_new_round(self) -> None:
        if self.game_manager.get_status() != SessionStatus.FINISHED and not confirm_new_round(self):
            return
        self.game_manager.reset_session()
        self.live_panel.stop_session()
        self.setup_panel.reset_state()
        self._set_mode(HostMode.SETUP)

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)

    def _handle_settings(self) -> None:
        dialog = SettingsDialog(
            self,
            self._ui_font_size,
            self._game_font_size,
            self._scoreboard_size,
            self._animate_reveal,
        )
        if dialog.exec():
            self._ui_font_size = dialog.get_ui_font_size()
            self._game_font_size = dialog.get_game_font_size()
            self._scoreboard_size = dialog.get_scoreboard_size()
            self._animate_reveal = dialog.get_animate_reveal()
            self._apply_styles()

    def _apply_styles(self) -> None:
        self.setStyleSheet(Styles.get_main_window_style())

        ui_style = f"font-size: {self._ui_font_size}pt;"
        for button in (self.about_button, self.help_button, self.settings_button):
            button.setStyleSheet(ui_style)

        self.setup_panel.apply_font_size(self._ui_font_size)
        self.live_panel.set_game_font_size(self._game_font_size)
        self.live_panel.set_scoreboard_size(self._scoreboard_size)
        self.live_panel.set_animate_reveal(self._animate_reveal)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.refresh_timer.stop()
        self.live_panel.teardown()
        self.game_manager.close()
        super().closeEvent(event)
