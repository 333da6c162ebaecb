"""Console participant: join a running host and answer from the terminal."""

from __future__ import annotations

import argparse
import sys
import time
from urllib.parse import urlparse

from greatminds_app.constants.game_constants import ANONYMOUS_PARTICIPANT_NAME
from greatminds_app.constants.network_constants import (
    CHANGE_POLL_INTERVAL_SECONDS,
    DEFAULT_STORE_TIMEOUT_SECONDS,
)
from greatminds_app.core.errors import ConfigurationError, GameError, NotFoundError
from greatminds_app.core.models import ParticipantStage
from greatminds_app.core.services.http_store import HttpSessionStore, StoreSettings
from greatminds_app.core.services.participant_session import (
    ParticipantSession,
    session_id_from_join_url,
)
from greatminds_app.core.services.realtime_sync import RealtimeSyncAdapter
from greatminds_app.utils.logging_config import configure_logging

_STAGE_MESSAGES = {
    ParticipantStage.WAITING: "Answer locked! Waiting for the Great Minds to align…",
    ParticipantStage.REVEALED: "Results are in! Check the main screen.",
    ParticipantStage.FINISHED: "That's a wrap! Thanks for playing.",
}


def _settings_from_args(args: argparse.Namespace) -> StoreSettings:
    if args.host_url:
        return StoreSettings(base_url=args.host_url, timeout_seconds=args.timeout)
    parsed = urlparse(args.join)
    if parsed.scheme and parsed.netloc:
        return StoreSettings(base_url=f"{parsed.scheme}://{parsed.netloc}", timeout_seconds=args.timeout)
    return StoreSettings.from_environment()


def _prompt_and_submit(participant: ParticipantSession, adapter: RealtimeSyncAdapter) -> None:
    print(f"\nQuestion {participant.question_index + 1}: {participant.current_question}")
    text = input("Your answer: ")
    # The host may have moved on while we were typing.
    adapter.pump()
    if participant.stage != ParticipantStage.ACCEPTING_ANSWER:
        print("Too late, the question has closed.")
        return
    try:
        participant.submit(text)
    except GameError as exc:
        print(exc)


def run(participant: ParticipantSession, poll_interval: float) -> None:
    adapter = participant.observe()
    with adapter:
        announced: tuple[ParticipantStage, int] | None = None
        while True:
            adapter.pump()
            stage = participant.stage
            if stage == ParticipantStage.ACCEPTING_ANSWER:
                _prompt_and_submit(participant, adapter)
                continue
            current = (stage, participant.question_index)
            if current != announced:
                announced = current
                message = _STAGE_MESSAGES.get(stage)
                if message:
                    print(message)
            if stage == ParticipantStage.FINISHED:
                return
            time.sleep(poll_interval)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="GreatMindsAlike console participant")
    parser.add_argument("join", help="Join link shared by the host, or a bare session id")
    parser.add_argument("--host-url", help="Host address; defaults to the join link's origin or $GREATMINDS_STORE_URL")
    parser.add_argument("--name", default=ANONYMOUS_PARTICIPANT_NAME, help="Name shown on the scoreboard")
    parser.add_argument("--timeout", type=float, default=DEFAULT_STORE_TIMEOUT_SECONDS, help="HTTP timeout in seconds")
    parser.add_argument("--poll", type=float, default=CHANGE_POLL_INTERVAL_SECONDS, help="Seconds between polls")
    args = parser.parse_args(argv)

    logger = configure_logging()

    try:
        session_id = session_id_from_join_url(args.join)
        settings = _settings_from_args(args)
    except (ConfigurationError, NotFoundError) as exc:
        print(exc, file=sys.stderr)
        return 2

    with HttpSessionStore(settings) as store:
        participant = ParticipantSession(store, participant_name=args.name)
        try:
            participant.join(session_id)
        except NotFoundError as exc:
            print(exc, file=sys.stderr)
            return 1
        logger.info("Connected to %s", settings.base_url)
        try:
            run(participant, args.poll)
        except (KeyboardInterrupt, EOFError):
            print("\nLeaving the session.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
