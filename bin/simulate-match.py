"""Play a full single-player match through the game service with an AI on both sides.

The service drives its own AI opponent; this script plays the human seat
with a second AIPlayer and prints the outcome.

Usage:
    uv run python bin/simulate-match.py
    uv run python bin/simulate-match.py --seed 7 --difficulty hard --max-guesses 0
"""

from __future__ import annotations

import argparse
import asyncio
import random

import structlog

from game.logic.ai_player import AIPlayer
from game.logic.enums import Difficulty, GameMode, RoomState
from game.logic.game import compute_statistics
from game.logic.settings import GameSettings
from game.server.app import create_service
from game.server.settings import GameServiceSettings
from shared.logging import setup_logging

PLAYER_ID = "sim-player"
MAX_TURNS = 200

logger = structlog.get_logger()


async def play(seed: int, difficulty: Difficulty, max_guesses: int | None) -> None:
    service = create_service(GameServiceSettings(seed=seed, log_dir=None))
    settings = GameSettings(difficulty=difficulty, max_guesses=max_guesses)
    room = await service.create_room(PLAYER_ID, "Simulator", GameMode.SINGLE_PLAYER, settings)
    player = AIPlayer(difficulty, random.Random(seed + 1))  # noqa: S311

    await service.handle_action(player.choose_secret(room, PLAYER_ID))
    for _ in range(MAX_TURNS):
        room = service.get_room(room.id)
        if room is None or room.state == RoomState.FINISHED:
            break
        context = service.catalog_context(room)
        if room.pending_question is not None and room.pending_question.asker_id != PLAYER_ID:
            action = player.answer(room, PLAYER_ID, context)
        elif room.current_turn_player_id == PLAYER_ID:
            action = player.choose_turn_action(room, PLAYER_ID, context)
        else:
            break
        await service.handle_action(action)

    room = service.get_room(room.id) if room is not None else None
    if room is None or room.state != RoomState.FINISHED:
        logger.warning("match did not finish", turns=MAX_TURNS)
        return
    stats = compute_statistics(room)
    logger.info(
        "match finished",
        winner_id=room.winner_id,
        reason=room.end_reason,
        questions=stats.question_count,
        guesses=stats.guess_count,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate an AI-vs-AI guess-who match")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--difficulty", type=Difficulty, choices=list(Difficulty), default=Difficulty.MEDIUM)
    parser.add_argument("--max-guesses", type=int, default=1, help="0 for unlimited guesses")
    parser.add_argument("--log-dir", default=None)
    args = parser.parse_args()

    setup_logging(args.log_dir)
    asyncio.run(play(args.seed, args.difficulty, args.max_guesses or None))


if __name__ == "__main__":
    main()
