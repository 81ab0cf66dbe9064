"""Stats computation and pretty-printing for RPSLS sessions."""

from dataclasses import dataclass, field
from collections import Counter
import random
from typing import Optional

import numpy as np

from .engine import MOVES, MatchResult, RoundOutcome
from .policy import DEFAULT_CONFIG, OpponentConfig, choose_move

# ---------------------------------------------------------------------------
# Uniformity check (chi-square, 4 degrees of freedom)
# ---------------------------------------------------------------------------

# Critical values of the chi-square distribution with df = len(MOVES) - 1 = 4
CHI_SQUARE_CRITICAL_DF4 = {
    0.05: 9.488,
    0.01: 13.277,
    0.001: 18.467,
}


def chi_square_uniformity(counts) -> float:
    """Pearson's chi-square statistic of `counts` against a uniform spread.

    `counts` is a Counter/dict keyed by Move or a sequence in MOVES order.
    """
    if isinstance(counts, dict):
        observed = np.array([counts.get(m, 0) for m in MOVES], dtype=float)
    else:
        observed = np.asarray(counts, dtype=float)
    total = observed.sum()
    if total == 0:
        return 0.0
    expected = total / observed.size
    return float(((observed - expected) ** 2 / expected).sum())


@dataclass
class AuditResult:
    """Outcome of sampling the opponent policy many times."""
    label: str
    trials: int
    counts: dict = field(default_factory=dict)
    statistic: float = 0.0
    alpha: float = 0.001

    @property
    def critical_value(self) -> float:
        return CHI_SQUARE_CRITICAL_DF4[self.alpha]

    @property
    def uniform(self) -> bool:
        return self.statistic < self.critical_value

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "trials": self.trials,
            "counts": {m.value: self.counts.get(m, 0) for m in MOVES},
            "chi_square": round(self.statistic, 3),
            "critical_value": self.critical_value,
            "alpha": self.alpha,
            "uniform": self.uniform,
        }


def audit_opponent(
    config: OpponentConfig = DEFAULT_CONFIG,
    history=(),
    trials: int = 5000,
    seed: Optional[int] = None,
    alpha: float = 0.001,
) -> AuditResult:
    """Sample the opponent's choice `trials` times for a fixed history."""
    if alpha not in CHI_SQUARE_CRITICAL_DF4:
        raise ValueError(f"alpha must be one of {sorted(CHI_SQUARE_CRITICAL_DF4)}")
    rng = random.Random(seed)
    history = tuple(history)
    counts = Counter(choose_move(history, config, rng) for _ in range(trials))
    return AuditResult(
        label=config.label,
        trials=trials,
        counts=dict(counts),
        statistic=chi_square_uniformity(counts),
        alpha=alpha,
    )


# ---------------------------------------------------------------------------
# Session summaries
# ---------------------------------------------------------------------------

def format_prediction_hint(prediction) -> str:
    """Hint text shown to the player; empty when nothing was predicted."""
    if prediction is None or prediction.predicted_move is None:
        return ""
    return (f'AI predicts you might choose "{prediction.predicted_move.value}" '
            f"(confidence {prediction.confidence * 100:.0f}%).")


def prediction_hit_rate(rounds) -> float:
    """Percentage of predicted rounds where the player did play the predicted move."""
    predicted = [r for r in rounds if r.predicted.predicted_move is not None]
    if not predicted:
        return 0.0
    hits = sum(1 for r in predicted if r.predicted.predicted_move is r.player_move)
    return hits / len(predicted) * 100


def session_summary(session) -> dict:
    """Aggregate counters for a session's round log."""
    rounds = session.rounds
    total = len(rounds)
    outcomes = Counter(r.outcome for r in rounds)
    return {
        "rounds": total,
        "player_score": session.player_score,
        "opponent_score": session.opponent_score,
        "ties": outcomes[RoundOutcome.TIE],
        "tries_remaining": session.tries_remaining,
        "win_pct": round(outcomes[RoundOutcome.WIN] / total * 100, 2) if total else 0.0,
        "player_move_distribution": dict(Counter(r.player_move.value for r in rounds)),
        "opponent_move_distribution": dict(Counter(r.opponent_move.value for r in rounds)),
        "prediction_hit_rate": round(prediction_hit_rate(rounds), 2),
        "counter_rate": round(sum(1 for r in rounds if r.countered) / total * 100, 2) if total else 0.0,
    }


# ---------------------------------------------------------------------------
# Pretty-printing
# ---------------------------------------------------------------------------

_OUTCOME_TEXT = {
    RoundOutcome.WIN: "You win this round!",
    RoundOutcome.LOSE: "You lose this round.",
    RoundOutcome.TIE: "It's a tie.",
}


def format_round(result) -> str:
    return (f"You chose {result.player_move.value.capitalize()} — "
            f"CPU chose {result.opponent_move.value.capitalize()}. "
            f"{_OUTCOME_TEXT[result.outcome]}")


def print_round_summary(result):
    """Print one resolved round and the running score."""
    print(f"  {format_round(result)}")
    tries = "∞" if result.tries_remaining is None else result.tries_remaining
    print(f"  Player: {result.player_score} — CPU: {result.opponent_score}  |  Tries left: {tries}")


def print_session_summary(session):
    """Print a summary of the session so far."""
    s = session_summary(session)
    print("=" * 60)
    print(f"  Session vs {session.config.label}")
    print(f"  Rounds: {s['rounds']}")
    print("=" * 60)
    print(f"  {'Player score':20s} {s['player_score']:>10d}")
    print(f"  {'CPU score':20s} {s['opponent_score']:>10d}")
    print(f"  {'Ties':20s} {s['ties']:>10d}")
    print(f"  {'Win %':20s} {s['win_pct']:>9.1f}%")
    print(f"  {'Prediction hits':20s} {s['prediction_hit_rate']:>9.1f}%")
    print(f"  {'Counter rate':20s} {s['counter_rate']:>9.1f}%")
    print()
    print(f"  Your moves: {s['player_move_distribution']}")
    print(f"  CPU moves:  {s['opponent_move_distribution']}")
    print("=" * 60)


def print_match_summary(result: MatchResult):
    """Print a detailed summary of a simulated match."""
    print("=" * 60)
    print(f"  {result.player_name}  vs  {result.opponent_name}")
    print(f"  Rounds: {result.rounds}")
    print("=" * 60)
    print(f"  {'':20s} {'Player':>10s} {'CPU':>10s}")
    print(f"  {'Wins':20s} {result.player_wins:>10d} {result.opponent_wins:>10d}")
    print(f"  {'Ties':20s} {result.ties:>10d} {result.ties:>10d}")
    print(f"  {'Win %':20s} {result.player_win_pct:>9.1f}% {result.opponent_win_pct:>9.1f}%")
    print(f"  {'Prediction acc.':20s} {'':>10s} {result.prediction_accuracy:>9.1f}%")
    print()
    print(f"  Player move distribution: {result.player_move_distribution}")
    print(f"  CPU move distribution:    {result.opponent_move_distribution}")

    if result.player_wins > result.opponent_wins:
        winner = result.player_name
    elif result.opponent_wins > result.player_wins:
        winner = "CPU"
    else:
        winner = "DRAW"
    print(f"\n  ★ Winner: {winner}")
    print("=" * 60)


def print_audit(result: AuditResult):
    """Print the opponent uniformity audit."""
    print("=" * 60)
    print(f"  Opponent audit: {result.label}  |  {result.trials} samples")
    print("=" * 60)
    expected = result.trials / len(MOVES)
    for m in MOVES:
        n = result.counts.get(m, 0)
        print(f"  {m.value:<10s} {n:>7d}  ({n - expected:+.1f} vs expected)")
    print()
    verdict = "uniform" if result.uniform else "NOT uniform"
    print(f"  χ² = {result.statistic:.3f}  (critical {result.critical_value} at α={result.alpha})  →  {verdict}")
    print("=" * 60)
