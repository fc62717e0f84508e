"""Entry point for the headless gem cascade engine.

Sets up a GameEngine and lets a bot play one timed session, printing the final stats.
Run with: ``python src/main.py --difficulty hard --strategy greedy --seed 7``
"""
import argparse
import logging
import random

from gemcascade.ai.autoplay import GreedyAgent, RandomAgent, play_game
from gemcascade.config import load_config
from gemcascade.engine import GameEngine
from gemcascade.events.bus import EVENT_ACHIEVEMENT_UNLOCKED, EVENT_LEVEL_UP


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play a headless gem cascade session.")
    parser.add_argument("--difficulty", default=None, help="easy, medium or hard")
    parser.add_argument("--strategy", choices=("greedy", "random"), default="greedy")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", default=None, help="optional TOML config file")
    parser.add_argument("--max-moves", type=int, default=200)
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv=None) -> dict:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.config) if args.config else None
    rng = random.Random(args.seed)
    engine = GameEngine(config, difficulty=args.difficulty, rng=rng)
    engine.subscribe(EVENT_LEVEL_UP, lambda sender, **k: print(f"Level {k['level']} at {k['score']} points"))
    engine.subscribe(EVENT_ACHIEVEMENT_UNLOCKED, lambda sender, **k: print(f"Achievement: {k['name']} (+{k['reward']})"))
    agent = GreedyAgent(rng) if args.strategy == "greedy" else RandomAgent(rng)
    result = play_game(engine, agent, max_moves=args.max_moves)
    stats = result.snapshot.stats()
    print(f"Moves played: {result.moves}{' (no legal swap left)' if result.stalled else ''}")
    for key, value in stats.items():
        print(f"{key}: {value}")
    return stats


if __name__ == "__main__":
    main()
