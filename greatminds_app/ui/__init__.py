"""Qt UI components for the host application."""

from .dialog_helpers import (
    confirm_new_round,
    show_error,
    show_info,
    show_warning,
)
from .host_main_window import HostMainWindow

__all__ = [
    "HostMainWindow",
    "confirm_new_round",
    "show_error",
    "show_info",
    "show_warning",
]
