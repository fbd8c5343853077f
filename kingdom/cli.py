"""
Kingdom CLI - Command-line interface for the engine.

Usage:
    kingdom simulate [--players N] [--seed S] [--policy random|first|console]
    kingdom replay <record_file>     Replay a recorded match and print scores
    kingdom cards                    List the card catalog
"""

import argparse
import json
import logging
import sys

from pydantic import ValidationError


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Kingdom - Deck-Building Card Game Rules Engine",
        prog="kingdom",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level (default WARNING)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run a match between policies")
    simulate_parser.add_argument("--config", help="Path to a JSON GameConfig")
    simulate_parser.add_argument("--players", type=int, help="Number of players (2-6)")
    simulate_parser.add_argument("--seed", type=int, help="Random seed")
    simulate_parser.add_argument(
        "--policy",
        choices=["random", "first", "console"],
        default="random",
        help="Policy for every player",
    )
    simulate_parser.add_argument("--max-turns", type=int, default=500, help="Turn limit")
    simulate_parser.add_argument("--record", help="Write the match record to this JSON file")
    simulate_parser.add_argument("--show-log", action="store_true", help="Print the game log")

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Replay a recorded match")
    replay_parser.add_argument("record_file", help="Path to a match record")

    # Cards command
    subparsers.add_parser("cards", help="List the card catalog")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "replay":
        return cmd_replay(args)
    elif args.command == "cards":
        return cmd_cards(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_simulate(args):
    """Run one match and print the result."""
    from .bots import ConsolePolicy, FirstLegalPolicy, RandomPolicy
    from .config import load_config
    from .session import GameLoop

    try:
        config = load_config(args.config)
        updates = {}
        if args.players is not None:
            updates["player_names"] = [f"Player {i + 1}" for i in range(args.players)]
        if args.seed is not None:
            updates["seed"] = args.seed
        if updates:
            config = config.model_validate({**config.model_dump(), **updates})
    except (OSError, ValueError, ValidationError) as e:
        print(f"Error: invalid configuration: {e}")
        sys.exit(1)

    policies = []
    for i in range(config.num_players):
        if args.policy == "random":
            seed = None if config.seed is None else config.seed + i + 1
            policies.append(RandomPolicy(seed))
        elif args.policy == "first":
            policies.append(FirstLegalPolicy())
        else:
            policies.append(ConsolePolicy())

    loop = GameLoop(config, policies)
    result = loop.run(max_turns=args.max_turns)

    if args.show_log:
        for entry in loop.state.log:
            who = "-" if entry.player is None else entry.player
            print(f"{entry.seq:5d} t{entry.turn:<3d} p{who} {entry.op} {entry.card or ''} {entry.detail}")

    print(f"Seed: {result.record.seed}")
    print(f"Turns: {result.turns}" + ("" if result.finished else " (turn limit reached)"))
    for pid, score in result.scores.items():
        marker = " *" if pid in result.winners else ""
        print(f"  {loop.state.players[pid].name}: {score}{marker}")

    if args.record:
        with open(args.record, "w", encoding="utf-8") as f:
            json.dump(result.record.to_dict(), f, indent=2)
        print(f"Record written to {args.record}")
    return result


def cmd_replay(args):
    """Replay a recorded match."""
    from .session import MatchRecord, replay

    try:
        with open(args.record_file, "r", encoding="utf-8") as f:
            record = MatchRecord.from_dict(json.load(f))
    except FileNotFoundError:
        print(f"Error: File not found: {args.record_file}")
        sys.exit(1)

    loop = replay(record)
    result = loop.result()
    print(f"Replayed {len(record.actions)} actions, {len(loop.state.log)} log entries")
    for pid, score in result.scores.items():
        print(f"  {loop.state.players[pid].name}: {score}")
    return result


def cmd_cards(args):
    """List the card catalog."""
    from .games.dominion import create_base_catalog

    catalog = create_base_catalog()
    for card in sorted(catalog, key=lambda c: (c.cost, c.name)):
        types = "-".join(t.value for t in card.types)
        print(f"{card.cost:2d}  {card.name:<14} {types:<18} {card.text}")
    return catalog


if __name__ == "__main__":
    main()
