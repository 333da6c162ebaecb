"""Application entry point for the GreatMindsAlike host."""

from __future__ import annotations

import socket
import sys

from PySide6.QtWidgets import QApplication

from greatminds_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from greatminds_app.core.game_manager import GameManager
from greatminds_app.core.services.session_store import InMemorySessionStore
from greatminds_app.server.api_server import start_api_server
from greatminds_app.ui.host_main_window import HostMainWindow
from greatminds_app.utils.logging_config import configure_logging


def _determine_public_base_url(port: int) -> str:
    """Best-effort determination of the local IP participants can reach."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}"


def main() -> None:
    """Initialize logging, start the API server, and launch the Qt UI."""
    logger = configure_logging()
    logger.info("Starting GreatMindsAlike host…")

    store = InMemorySessionStore()
    start_api_server(store=store, host=DEFAULT_HOST, port=DEFAULT_PORT)
    public_base_url = _determine_public_base_url(DEFAULT_PORT)
    game_manager = GameManager(store=store, public_base_url=public_base_url)
    logger.info("Participants join through %s", public_base_url)

    app = QApplication(sys.argv)
    window = HostMainWindow(game_manager=game_manager)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
