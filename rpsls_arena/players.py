"""Scripted player archetypes used to exercise the opponent in simulations."""

from abc import ABC, abstractmethod
import random

from .engine import Move, MOVES, DEFAULT_RULES


class Player(ABC):
    """Base class for scripted players."""

    def __init__(self):
        self.rng: random.Random = random.Random()
        self.reset()

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def choose(self, round_num: int, my_history: tuple, opp_history: tuple) -> Move:
        ...

    def reset(self):
        """Reset any internal state between matches."""
        pass

    def __repr__(self):
        return f"<{self.name}>"


def _counter_move(move: Move) -> Move:
    """Return the lower-index move that beats `move`."""
    return next(m for m in MOVES if m in DEFAULT_RULES.counters_of(move))


# ---------------------------------------------------------------------------
# Constant / cyclic players
# ---------------------------------------------------------------------------

class AlwaysRock(Player):
    """Always chooses Rock.

    The most predictable player possible. Any working predictor should
    crush it.

    **Type**: Baseline
    """
    name = "Always Rock"

    def choose(self, round_num, my_history, opp_history):
        return Move.ROCK


class PureRandom(Player):
    """Chooses a move completely at random.

    Nothing to learn here: the opponent should hover around an even score.

    **Type**: Baseline
    """
    name = "Pure Random"

    def choose(self, round_num, my_history, opp_history):
        return self.rng.choice(MOVES)


class Cycle(Player):
    """Cycles Rock -> Paper -> Scissors -> Lizard -> Spock repeatedly.

    An order-1 sequence predictor locks onto this after one lap.

    **Sequence**: R, P, S, L, K, R, P...
    **Type**: Pattern
    """
    name = "Cycle"

    def choose(self, round_num, my_history, opp_history):
        return MOVES[round_num % len(MOVES)]


class Spiral(Player):
    """Plays every move twice before moving on: R, R, P, P, S, S...

    Frequency counting sees an even spread; order 2 sees the pattern.

    **Type**: Pattern
    """
    name = "Spiral"

    def choose(self, round_num, my_history, opp_history):
        return MOVES[(round_num // 2) % len(MOVES)]


# ---------------------------------------------------------------------------
# Reactive players
# ---------------------------------------------------------------------------

class TitForTat(Player):
    """Repeats the computer's last move. Opens with Rock.

    **Type**: Reactive
    """
    name = "Tit-for-Tat"

    def choose(self, round_num, my_history, opp_history):
        if not opp_history:
            return Move.ROCK
        return opp_history[-1]


class AntiTitForTat(Player):
    """Plays a move that beats the computer's last move.

    **Type**: Reactive
    """
    name = "Anti-Tit-for-Tat"

    def choose(self, round_num, my_history, opp_history):
        if not opp_history:
            return self.rng.choice(MOVES)
        return _counter_move(opp_history[-1])


class StickyRandom(Player):
    """Picks a random move and sticks with it for 3-8 rounds.

    Rewards predictors that weigh recent history.

    **Type**: Baseline / Pattern
    """
    name = "Sticky Random"

    def reset(self):
        self._current = Move.ROCK
        self._remaining = 0

    def choose(self, round_num, my_history, opp_history):
        if self._remaining <= 0:
            self._current = self.rng.choice(MOVES)
            self._remaining = self.rng.randint(3, 8)
        self._remaining -= 1
        return self._current


ALL_PLAYER_CLASSES = [AlwaysRock, PureRandom, Cycle, Spiral, TitForTat, AntiTitForTat, StickyRandom]


def get_all_players() -> list[Player]:
    """Return fresh instances of all players."""
    return [cls() for cls in ALL_PLAYER_CLASSES]


def get_player_by_name(name: str) -> Player:
    """Get a single player instance by name (case-insensitive)."""
    name_lower = name.lower()
    for cls in ALL_PLAYER_CLASSES:
        if cls.name.lower() == name_lower:
            return cls()
    available = ", ".join(cls.name for cls in ALL_PLAYER_CLASSES)
    raise ValueError(f"Unknown player: '{name}'. Available: {available}")
