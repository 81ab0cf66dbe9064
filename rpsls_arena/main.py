"""CLI entry point for RPSLS Arena."""

import argparse
import logging
import random
import sys

from .engine import Move, MOVES, run_match
from .errors import RpslsError
from .export import export_json, export_csv
from .players import ALL_PLAYER_CLASSES, get_all_players, get_player_by_name
from .policy import DIFFICULTY_PRESETS, OpponentConfig
from .predictors import ALL_PREDICTOR_CLASSES
from .session import GameSession, SessionConfig
from .stats import (
    audit_opponent,
    format_prediction_hint,
    print_audit,
    print_match_summary,
    print_round_summary,
    print_session_summary,
)

# Number keys 1-5 play the moves
KEY_MAP = {str(i): m for i, m in enumerate(MOVES, 1)}


def list_catalogue():
    """Print difficulties, predictors and scripted players."""
    print("\nDifficulties:")
    print("-" * 40)
    for name in DIFFICULTY_PRESETS:
        print(f"  {name:<8s} {OpponentConfig().with_difficulty(name).label}")
    print("\nPredictors:")
    print("-" * 40)
    for cls in ALL_PREDICTOR_CLASSES:
        print(f"  {cls.name}")
    print("\nScripted players:")
    print("-" * 40)
    for i, cls in enumerate(ALL_PLAYER_CLASSES, 1):
        print(f"  {i:>2d}. {cls.name}")
    print()


def _config_from_args(args) -> SessionConfig:
    options = {}
    for key in ("difficulty", "strategy", "order", "weight", "history_capacity", "max_tries"):
        value = getattr(args, key, None)
        if value is not None:
            options[key] = value
    if getattr(args, "min_samples", None) is not None:
        options["min_confidence_samples"] = args.min_samples
    if getattr(args, "no_ai", False):
        options["enabled"] = False
    return SessionConfig.from_mapping(options)


def cmd_play(args):
    """Interactive play against the predictive opponent."""
    session = GameSession(_config_from_args(args), rng=random.Random(args.seed))
    print(f"\n🎮 RPSLS vs {session.config.label}")
    print("  Moves: " + "  ".join(f"{k}={m.value}" for k, m in KEY_MAP.items()))
    print("  r=reset  h=history  s=summary  q=quit\n")

    while True:
        try:
            raw = input("Your move> ").strip().lower()
        except EOFError:
            print()
            break
        if raw in ("q", "quit", "exit"):
            break
        if raw == "r":
            session.reset()
            print("  Scores reset. Choose a move to start.")
            continue
        if raw == "h":
            print("  " + (", ".join(m.value for m in session.get_history()) or "(empty)"))
            continue
        if raw == "s":
            print_session_summary(session)
            continue

        try:
            result = session.submit_move(KEY_MAP.get(raw, raw))
        except RpslsError as exc:
            print(f"  ✗ {exc}")
            continue

        hint = format_prediction_hint(result.predicted)
        if hint and args.show_hints:
            print(f"  {hint}")
        print_round_summary(result)
        if session.exhausted:
            print("  Game Over — no tries left. Press r to reset.")

    print_session_summary(session)
    if args.export and args.output:
        _export(args, session)


def cmd_simulate(args):
    """Run scripted players against the opponent."""
    config = _config_from_args(args)
    players = get_all_players() if args.player == "all" else [get_player_by_name(args.player)]
    print(f"\n🤖 Simulation vs {config.label}")
    print(f"  {len(players)} player(s)  |  {args.rounds} rounds"
          + (f"  |  seed={args.seed}" if args.seed is not None else ""))

    session = GameSession(config, rng=random.Random(args.seed))
    for i, player in enumerate(players):
        match_seed = (args.seed * 1000 + i) if args.seed is not None else None
        result = run_match(player, session, rounds=args.rounds, seed=match_seed)
        print_match_summary(result)

    if args.export and args.output:
        _export(args, session)


def cmd_audit(args):
    """Check how evenly the opponent spreads its moves for a given history."""
    config = _config_from_args(args).opponent
    history = [Move.parse(m) for m in args.history]
    print(f"\n📊 Opponent audit  |  history: {', '.join(m.value for m in history) or '(empty)'}")
    result = audit_opponent(config, history, trials=args.trials, seed=args.seed)
    print_audit(result)


def _export(args, session):
    """Handle export based on CLI args."""
    fmt = args.export.lower()
    if fmt == "json":
        export_json(session, args.output)
    elif fmt == "csv":
        export_csv(session, args.output)
    else:
        print(f"  ✗ Unknown export format: {fmt}. Use 'json' or 'csv'.")


def _add_opponent_args(p):
    p.add_argument("--difficulty", choices=list(DIFFICULTY_PRESETS), help="Opponent preset")
    p.add_argument("--strategy", choices=[cls.name for cls in ALL_PREDICTOR_CLASSES],
                   help="Prediction strategy (default: sequence)")
    p.add_argument("--order", type=int, help="Sequence order, 1-5 (default: 2)")
    p.add_argument("--weight", type=float, help="Max chance of following a prediction, 0-1 (default: 0.8)")
    p.add_argument("--min-samples", type=int, help="Minimum observations before predicting")
    p.add_argument("--history-capacity", type=int, help="Keep only the last N player moves")
    p.add_argument("--no-ai", action="store_true", help="Opponent plays uniformly at random")
    p.add_argument("--seed", type=int, default=None, help="RNG seed for reproducibility")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="rpsls_arena",
        description="🎮 Rock-Paper-Scissors-Lizard-Spock against a predictive opponent",
    )
    parser.add_argument("--list", action="store_true", help="List difficulties, predictors and players")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each round")

    subparsers = parser.add_subparsers(dest="command")

    # play
    play = subparsers.add_parser("play", help="Play interactively")
    _add_opponent_args(play)
    play.add_argument("--max-tries", type=int, help="Number of rounds before the game is over")
    play.add_argument("--show-hints", action="store_true", help="Show what the AI predicts")
    play.add_argument("--export", choices=["json", "csv"], help="Export format")
    play.add_argument("--output", help="Export file path")

    # simulate
    sim = subparsers.add_parser("simulate", help="Scripted player(s) vs the opponent")
    _add_opponent_args(sim)
    sim.add_argument("--player", default="all", help="Scripted player name, or 'all'")
    sim.add_argument("--rounds", type=int, default=200, help="Number of rounds (default: 200)")
    sim.add_argument("--export", choices=["json", "csv"], help="Export the last match's log")
    sim.add_argument("--output", help="Export file path")

    # audit
    aud = subparsers.add_parser("audit", help="Chi-square check of the opponent's move spread")
    _add_opponent_args(aud)
    aud.add_argument("history", nargs="*", help="Player history, oldest first")
    aud.add_argument("--trials", type=int, default=5000, help="Number of samples (default: 5000)")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.list:
        list_catalogue()
        return 0

    try:
        if args.command == "play":
            cmd_play(args)
        elif args.command == "simulate":
            cmd_simulate(args)
        elif args.command == "audit":
            cmd_audit(args)
        else:
            parser.print_help()
    except (RpslsError, ValueError) as exc:
        print(f"  ✗ {exc}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
