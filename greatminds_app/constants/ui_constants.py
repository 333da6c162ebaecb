"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "GreatMindsAlike Host"
PLACEHOLDER_QUESTIONS: str = "Type one question per line, e.g. 'Best pizza topping?'"
JOIN_URL_PLACEHOLDER: str = "http://<host-ip>:8000/join?s=<session>"
ANSWER_REFRESH_INTERVAL_MS: int = 500
CLOUD_FRAME_INTERVAL_MS: int = 16

SETUP_TITLE: str = "Start a new round"
SETUP_SUBTITLE: str = "Everyone guesses what the majority will answer."
LAUNCH_BUTTON: str = "Launch"

LIVE_REVEAL_BUTTON: str = "Reveal the Great Minds"
LIVE_NEXT_BUTTON: str = "Next Question"
LIVE_END_BUTTON: str = "End Game"
LIVE_CANCEL_BUTTON: str = "Cancel"
LIVE_NEW_ROUND_BUTTON: str = "New Round"
LIVE_WAITING_FOR_ANSWERS: str = "Waiting for answers…"
LIVE_RESPONSES_TEMPLATE: str = "Live · {count} response{suffix}"
LIVE_POSITION_TEMPLATE: str = "Question {number} of {total}"
GAME_FINISHED_MESSAGE: str = "That was the last question. Thanks for playing!"
