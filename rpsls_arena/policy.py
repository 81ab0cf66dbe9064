"""Opponent policy: turn a prediction into the computer's move.

The computer does not blindly counter the predicted move. It follows the
prediction with probability ``weight * confidence`` and otherwise plays a
uniformly random move, so even a perfect predictor leaves the player
something to play against.
"""

from dataclasses import dataclass, field, asdict, replace
import random
from typing import Optional

from .engine import Move, MOVES, DEFAULT_RULES, RuleTable
from .errors import ConfigurationError
from .predictors import (
    MIN_ORDER,
    MAX_ORDER,
    NO_PREDICTION,
    PredictionResult,
    Predictor,
    get_predictor_by_name,
)


STRATEGIES = ("sequence", "frequency")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OpponentConfig:
    """How the computer picks its move.

    weight is the most the computer will ever follow a prediction; the
    actual chance is scaled down by the prediction's confidence.
    """
    enabled: bool = True
    strategy: str = "sequence"
    order: int = 2
    weight: float = 0.8
    min_confidence_samples: int = 1
    history_capacity: Optional[int] = None
    frequency_window: Optional[int] = None
    difficulty: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self):
        if not isinstance(self.enabled, bool):
            raise ConfigurationError(f"enabled must be a bool, got {self.enabled!r}")
        if self.strategy not in STRATEGIES:
            raise ConfigurationError(
                f"Unknown strategy: '{self.strategy}'. Available: {', '.join(STRATEGIES)}"
            )
        if not _is_int(self.order) or not MIN_ORDER <= self.order <= MAX_ORDER:
            raise ConfigurationError(
                f"order must be an integer between {MIN_ORDER} and {MAX_ORDER}, got {self.order!r}"
            )
        if not _is_number(self.weight) or not 0.0 <= self.weight <= 1.0:
            raise ConfigurationError(f"weight must be between 0 and 1, got {self.weight!r}")
        if not _is_int(self.min_confidence_samples) or self.min_confidence_samples < 0:
            raise ConfigurationError(
                f"min_confidence_samples must be a non-negative integer, got {self.min_confidence_samples!r}"
            )
        for key in ("history_capacity", "frequency_window"):
            value = getattr(self, key)
            if value is not None and (not _is_int(value) or value < 1):
                raise ConfigurationError(f"{key} must be a positive integer or None, got {value!r}")
        if self.difficulty is not None and self.difficulty not in DIFFICULTY_PRESETS:
            raise ConfigurationError(
                f"Unknown difficulty: '{self.difficulty}'. Available: {', '.join(DIFFICULTY_PRESETS)}"
            )

    @property
    def label(self) -> str:
        prefix = f"{self.difficulty} " if self.difficulty else ""
        if not self.enabled:
            return f"{prefix}(random)"
        return f"{prefix}({self.strategy}, order {self.order}, weight {self.weight:.2f})"

    def with_difficulty(self, difficulty: str) -> "OpponentConfig":
        """Copy of this config with a difficulty preset applied on top."""
        try:
            preset = DIFFICULTY_PRESETS[difficulty]
        except KeyError:
            raise ConfigurationError(
                f"Unknown difficulty: '{difficulty}'. Available: {', '.join(DIFFICULTY_PRESETS)}"
            ) from None
        return replace(self, difficulty=difficulty, **preset)

    @classmethod
    def from_mapping(cls, data: dict, base: Optional["OpponentConfig"] = None) -> "OpponentConfig":
        """Build a config from a dict of options (snake_case or camelCase keys).

        A ``difficulty`` key applies that preset first; any other options
        given alongside it override the preset's fields.
        """
        base = base or DEFAULT_CONFIG
        options = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name in _SESSION_KEYS:
                continue
            if name not in _FIELDS:
                raise ConfigurationError(f"Unknown configuration option: '{key}'")
            options[name] = value

        difficulty = options.pop("difficulty", None)
        if difficulty is not None:
            base = base.with_difficulty(difficulty)
        return replace(base, **options)

    def to_dict(self) -> dict:
        return asdict(self)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_ALIASES = {
    "minConfidenceSamples": "min_confidence_samples",
    "historyCapacity": "history_capacity",
    "frequencyWindow": "frequency_window",
    "maxTries": "max_tries",
}
_SESSION_KEYS = {"max_tries"}
_FIELDS = set(OpponentConfig.__dataclass_fields__)


# Preset bundles selectable by name. Explicit options override them.
DIFFICULTY_PRESETS = {
    "easy": {"enabled": False, "strategy": "sequence", "order": 1, "weight": 0.0},
    "normal": {"enabled": True, "strategy": "sequence", "order": 1, "weight": 0.6},
    "hard": {"enabled": True, "strategy": "sequence", "order": 2, "weight": 0.8},
    "expert": {"enabled": True, "strategy": "sequence", "order": 3, "weight": 1.0},
}

DEFAULT_CONFIG = OpponentConfig()


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OpponentDecision:
    """The computer's move plus what led to it."""
    move: Move
    prediction: PredictionResult = field(default=NO_PREDICTION)
    countered: bool = False


def build_predictor(config: OpponentConfig) -> Predictor:
    if config.strategy == "frequency":
        return get_predictor_by_name(
            "frequency",
            window=config.frequency_window,
            min_samples=config.min_confidence_samples,
        )
    return get_predictor_by_name(
        "sequence",
        order=config.order,
        min_samples=config.min_confidence_samples,
    )


def random_move(rng: random.Random) -> Move:
    return rng.choice(MOVES)


def pick_counter_for(predicted: Optional[Move], rng: random.Random, rules: RuleTable = DEFAULT_RULES) -> Move:
    """Uniformly pick one of the moves that beat `predicted`."""
    if predicted is None:
        return random_move(rng)
    # Fixed order so a seeded rng always picks the same counter
    counters = [m for m in MOVES if m in rules.counters_of(predicted)]
    return rng.choice(counters)


def decide(
    history,
    config: OpponentConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
    rules: RuleTable = DEFAULT_RULES,
) -> OpponentDecision:
    """Choose the computer's move for the given player history."""
    if rng is None:
        rng = random.Random()

    if not config.enabled:
        return OpponentDecision(random_move(rng))

    prediction = build_predictor(config).predict(history)
    if prediction.predicted_move is None:
        return OpponentDecision(random_move(rng), prediction)

    effective_chance = config.weight * prediction.confidence
    if rng.random() < effective_chance:
        return OpponentDecision(
            pick_counter_for(prediction.predicted_move, rng, rules),
            prediction,
            countered=True,
        )
    return OpponentDecision(random_move(rng), prediction)


def choose_move(
    history,
    config: OpponentConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
    rules: RuleTable = DEFAULT_RULES,
) -> Move:
    return decide(history, config, rng, rules).move
