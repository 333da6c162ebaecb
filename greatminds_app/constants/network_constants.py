"""Network configuration constants for the game server."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
JOIN_PATH: str = "/join"
JOIN_QUERY_PARAMETER: str = "s"
CHANGE_POLL_INTERVAL_SECONDS: float = 1.0
DEFAULT_STORE_TIMEOUT_SECONDS: float = 5.0
STORE_URL_ENV: str = "GREATMINDS_STORE_URL"
STORE_TIMEOUT_ENV: str = "GREATMINDS_STORE_TIMEOUT"
