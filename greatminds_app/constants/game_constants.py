"""Game rules shared across core, server and UI layers."""

WINNER_POINTS: int = 4
ANONYMOUS_PARTICIPANT_NAME: str = "Anonymous"

NO_SESSION_MESSAGE: str = "No session ID in URL. Ask the host to share the correct link."
SESSION_NOT_FOUND_MESSAGE: str = "Session not found. Double-check the link."

CLOUD_HEIGHT: int = 480
