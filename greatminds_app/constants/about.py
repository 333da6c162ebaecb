"""Static metadata describing GreatMindsAlike."""

APP_NAME = "GreatMindsAlike"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "GreatMindsAlike is a party game for a room full of phones. "
    "The host asks a question, everyone guesses what the majority will answer, "
    "and the most popular answers score points."
)

HELP_TEXT = (
    "Type one question per line and press Launch. Share the join link with the room; "
    "answers appear in the cloud as they arrive. Press Reveal to show the ranking, "
    "then Next Question to continue or End Game after the last question.\n\n"
    "Answers are grouped case-insensitively, so 'Pizza' and ' pizza ' count together."
)
