"""Core game engine for Rock-Paper-Scissors-Lizard-Spock rounds."""

from enum import Enum
from dataclasses import dataclass, field
from collections import Counter, deque
import random
from typing import Optional

from .errors import ConfigurationError, InvalidMoveError


class Move(Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"
    LIZARD = "lizard"
    SPOCK = "spock"

    @classmethod
    def parse(cls, value) -> "Move":
        """Accept a Move or its name (case-insensitive), else InvalidMoveError."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidMoveError(value)


# Enumeration order; also the tie-break order for predictors
MOVES = list(Move)

# What each move beats
BEATS = {
    Move.ROCK: frozenset({Move.SCISSORS, Move.LIZARD}),
    Move.PAPER: frozenset({Move.ROCK, Move.SPOCK}),
    Move.SCISSORS: frozenset({Move.PAPER, Move.LIZARD}),
    Move.LIZARD: frozenset({Move.PAPER, Move.SPOCK}),
    Move.SPOCK: frozenset({Move.ROCK, Move.SCISSORS}),
}


class RuleTable:
    """Fixed tournament relation over the five moves.

    Every move beats exactly two others and loses to the remaining two.
    The table is checked once at construction and never changes afterwards.
    """
    __slots__ = ('_beats', '_beaten_by')

    def __init__(self, beats: Optional[dict] = None):
        beats = BEATS if beats is None else beats
        self._beats = {m: frozenset(beats.get(m, ())) for m in MOVES}
        self._validate()
        self._beaten_by = {
            target: frozenset(m for m in MOVES if target in self._beats[m])
            for target in MOVES
        }

    def _validate(self):
        for a in MOVES:
            if a in self._beats[a]:
                raise ConfigurationError(f"{a.value} cannot beat itself")
            if len(self._beats[a]) != 2:
                raise ConfigurationError(
                    f"{a.value} must beat exactly 2 moves, got {len(self._beats[a])}"
                )
            for b in MOVES:
                if a is b:
                    continue
                if (b in self._beats[a]) == (a in self._beats[b]):
                    raise ConfigurationError(
                        f"exactly one of {a.value}/{b.value} must beat the other"
                    )

    def beats(self, a: Move, b: Move) -> bool:
        return b in self._beats[a]

    def counters_of(self, target: Move) -> frozenset:
        """Return the two moves that defeat `target`."""
        return self._beaten_by[target]

    def losing_to(self, target: Move) -> frozenset:
        """Return the two moves that `target` defeats."""
        return self._beats[target]

    def __repr__(self):
        pairs = ", ".join(
            f"{m.value}>{'/'.join(sorted(x.value for x in self._beats[m]))}"
            for m in MOVES
        )
        return f"RuleTable({pairs})"


DEFAULT_RULES = RuleTable()


class RoundOutcome(Enum):
    """Round result from the player's point of view."""
    WIN = "win"
    LOSE = "lose"
    TIE = "tie"


# Pre-computed outcome table for the default rules: (player, opponent) → outcome
_OUTCOME_TABLE = {
    (a, b): (
        RoundOutcome.TIE if a is b
        else RoundOutcome.WIN if DEFAULT_RULES.beats(a, b)
        else RoundOutcome.LOSE
    )
    for a in MOVES
    for b in MOVES
}


def evaluate(player_move: Move, opponent_move: Move, rules: Optional[RuleTable] = None) -> RoundOutcome:
    """Return win/lose/tie for the player."""
    if rules is None or rules is DEFAULT_RULES:
        return _OUTCOME_TABLE[player_move, opponent_move]
    if player_move is opponent_move:
        return RoundOutcome.TIE
    if rules.beats(player_move, opponent_move):
        return RoundOutcome.WIN
    return RoundOutcome.LOSE


class HistoryLog:
    """Append-only record of the player's moves, optionally capped.

    When a capacity is set, recording past it drops the oldest entry.
    Reads hand out tuples, so callers always get an immutable snapshot
    that later recordings cannot change.
    """
    __slots__ = ('_moves', 'capacity')

    def __init__(self, capacity: Optional[int] = None, moves=()):
        if capacity is not None and capacity < 1:
            raise ConfigurationError(f"history capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._moves: deque = deque(maxlen=capacity)
        for m in moves:
            self.record(m)

    def record(self, move: Move):
        self._moves.append(Move.parse(move))

    def recent(self, n: int) -> tuple:
        """Last `n` moves, oldest first; empty if fewer than `n` are held."""
        if n <= 0 or n > len(self._moves):
            return ()
        return tuple(self._moves)[-n:]

    def all(self) -> tuple:
        return tuple(self._moves)

    def clear(self):
        self._moves.clear()

    def __getitem__(self, key):
        return self.all()[key]

    def __len__(self):
        return len(self._moves)

    def __iter__(self):
        return iter(self.all())

    def __bool__(self):
        return bool(self._moves)

    def __repr__(self):
        return f"HistoryLog({[m.value for m in self._moves]!r}, capacity={self.capacity})"


@dataclass
class MatchResult:
    """Result of a scripted player playing a series of rounds against a session."""
    player_name: str
    opponent_name: str
    rounds: int
    player_wins: int = 0
    opponent_wins: int = 0
    ties: int = 0
    predictions_made: int = 0
    predictions_correct: int = 0
    player_moves: list = field(default_factory=list)
    opponent_moves: list = field(default_factory=list)

    @property
    def player_win_pct(self) -> float:
        return (self.player_wins / self.rounds * 100) if self.rounds else 0.0

    @property
    def opponent_win_pct(self) -> float:
        return (self.opponent_wins / self.rounds * 100) if self.rounds else 0.0

    @property
    def tie_pct(self) -> float:
        return (self.ties / self.rounds * 100) if self.rounds else 0.0

    @property
    def prediction_accuracy(self) -> float:
        if not self.predictions_made:
            return 0.0
        return self.predictions_correct / self.predictions_made * 100

    @property
    def player_move_distribution(self) -> dict[str, int]:
        return dict(Counter(m.value for m in self.player_moves))

    @property
    def opponent_move_distribution(self) -> dict[str, int]:
        return dict(Counter(m.value for m in self.opponent_moves))

    def to_dict(self) -> dict:
        return {
            "player": self.player_name,
            "opponent": self.opponent_name,
            "rounds": self.rounds,
            "player_wins": self.player_wins,
            "opponent_wins": self.opponent_wins,
            "ties": self.ties,
            "player_win_pct": round(self.player_win_pct, 2),
            "opponent_win_pct": round(self.opponent_win_pct, 2),
            "tie_pct": round(self.tie_pct, 2),
            "prediction_accuracy": round(self.prediction_accuracy, 2),
            "player_move_distribution": self.player_move_distribution,
            "opponent_move_distribution": self.opponent_move_distribution,
        }


def run_match(player, session, rounds: int = 100, seed: Optional[int] = None) -> MatchResult:
    """Play `rounds` rounds of a scripted player against a game session.

    The player gets its own seeded RNG derived from the master seed. The
    session is reset with its current configuration first; a session with
    a try limit simply stops the match early once exhausted.
    """
    master_rng = random.Random(seed)
    player.rng = random.Random(master_rng.randint(0, 2**31))
    player.reset()
    session.reset()

    result = MatchResult(
        player_name=player.name,
        opponent_name=session.config.label,
        rounds=0,
    )
    opponent_history: list[Move] = []

    for round_num in range(rounds):
        if session.exhausted:
            break
        move = player.choose(round_num, session.get_history(), tuple(opponent_history))
        rr = session.submit_move(move)

        if rr.outcome is RoundOutcome.WIN:
            result.player_wins += 1
        elif rr.outcome is RoundOutcome.LOSE:
            result.opponent_wins += 1
        else:
            result.ties += 1

        if rr.predicted.predicted_move is not None:
            result.predictions_made += 1
            if rr.predicted.predicted_move is move:
                result.predictions_correct += 1

        opponent_history.append(rr.opponent_move)
        result.player_moves.append(rr.player_move)
        result.opponent_moves.append(rr.opponent_move)
        result.rounds += 1

    return result
