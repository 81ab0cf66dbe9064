"""Move predictors: guess the player's next move from their history.

Both strategies are pure: the same history and settings always give the
same PredictionResult, and nothing is remembered between calls.
"""

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from .engine import Move, MOVES
from .errors import ConfigurationError


MIN_ORDER = 1
MAX_ORDER = 5


@dataclass(frozen=True)
class PredictionResult:
    """Predicted next player move and how much of the history supports it."""
    predicted_move: Optional[Move] = None
    confidence: float = 0.0
    samples: int = 0
    strategy: str = "none"

    def to_dict(self) -> dict:
        return {
            "predicted_move": self.predicted_move.value if self.predicted_move else None,
            "confidence": round(self.confidence, 4),
            "samples": self.samples,
            "strategy": self.strategy,
        }


NO_PREDICTION = PredictionResult()


def _most_common(counts: Counter) -> tuple[Optional[Move], int]:
    """Highest count wins; ties go to the lowest enumeration index."""
    best, best_count = None, 0
    for m in MOVES:
        if counts[m] > best_count:
            best, best_count = m, counts[m]
    return best, best_count


class Predictor(ABC):
    """Base class for move predictors."""

    def __init__(self, min_samples: int = 1):
        if min_samples < 0:
            raise ConfigurationError(f"min_samples must be >= 0, got {min_samples}")
        self.min_samples = min_samples

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def predict(self, history) -> PredictionResult:
        ...

    def __repr__(self):
        return f"<{self.name}>"


# ---------------------------------------------------------------------------
# Frequency strategy
# ---------------------------------------------------------------------------

class FrequencyPredictor(Predictor):
    """Predicts the player's most frequent move.

    If you play Rock half the time, Rock is predicted with confidence 0.5.
    An optional window restricts counting to the last N moves.

    **Type**: Frequency
    **Logic**: highest `Counter(history)` entry, lowest index on ties
    """
    name = "frequency"

    def __init__(self, window: Optional[int] = None, min_samples: int = 1):
        if window is not None and window < 1:
            raise ConfigurationError(f"frequency window must be >= 1, got {window}")
        self.window = window
        super().__init__(min_samples)

    def predict(self, history) -> PredictionResult:
        sample = tuple(history)
        if self.window is not None:
            sample = sample[-self.window:]
        total = len(sample)
        if total == 0 or total < self.min_samples:
            return NO_PREDICTION
        predicted, count = _most_common(Counter(sample))
        return PredictionResult(predicted, count / total, total, self.name)


# ---------------------------------------------------------------------------
# Order-N sequence strategy
# ---------------------------------------------------------------------------

class SequencePredictor(Predictor):
    """Predicts what followed the last N moves earlier in the history.

    Looks for every earlier occurrence of the most recent `order` moves and
    tallies the move that came right after each one. If you often play
    Scissors after Rock, Paper, it predicts Scissors when it sees Rock, Paper.
    A context that never occurred before falls back to frequency counting
    over the whole history.

    **Type**: Pattern / Markov
    **Order**: 1-5 (looks back N moves)
    """
    name = "sequence"

    def __init__(self, order: int = 2, min_samples: int = 1):
        if not MIN_ORDER <= order <= MAX_ORDER:
            raise ConfigurationError(
                f"order must be between {MIN_ORDER} and {MAX_ORDER}, got {order}"
            )
        self.order = order
        super().__init__(min_samples)
        self._fallback = FrequencyPredictor(min_samples=min_samples)

    def predict(self, history) -> PredictionResult:
        moves = tuple(history)
        n = self.order
        if len(moves) <= n:
            return NO_PREDICTION

        context = moves[-n:]
        followers = Counter()
        for i in range(len(moves) - n):
            if moves[i:i + n] == context:
                followers[moves[i + n]] += 1

        if not followers:
            return self._fallback.predict(moves)

        total = sum(followers.values())
        if total < self.min_samples:
            return NO_PREDICTION
        predicted, count = _most_common(followers)
        return PredictionResult(predicted, count / total, total, self.name)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

ALL_PREDICTOR_CLASSES = [SequencePredictor, FrequencyPredictor]


def get_predictor_by_name(name: str, **kwargs) -> Predictor:
    """Get a predictor instance by name (case-insensitive)."""
    name_lower = name.lower()
    for cls in ALL_PREDICTOR_CLASSES:
        if cls.name == name_lower:
            return cls(**kwargs)
    available = ", ".join(cls.name for cls in ALL_PREDICTOR_CLASSES)
    raise ConfigurationError(f"Unknown predictor: '{name}'. Available: {available}")
