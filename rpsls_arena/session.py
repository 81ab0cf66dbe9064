"""Game session: plays one round at a time against the predictive opponent."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
import random
from typing import Optional, Union

from .engine import Move, HistoryLog, RoundOutcome, RuleTable, DEFAULT_RULES, evaluate
from .errors import ConfigurationError, NoTriesRemainingError
from .policy import DEFAULT_CONFIG, OpponentConfig, decide
from .predictors import PredictionResult

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    IDLE = "idle"
    AWAITING_MOVE = "awaiting_move"
    ROUND_RESOLVED = "round_resolved"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class SessionConfig:
    """Opponent settings plus the try limit (None = unlimited)."""
    opponent: OpponentConfig = DEFAULT_CONFIG
    max_tries: Optional[int] = None

    def __post_init__(self):
        if self.max_tries is not None and (
            not isinstance(self.max_tries, int) or isinstance(self.max_tries, bool) or self.max_tries < 0
        ):
            raise ConfigurationError(
                f"max_tries must be a non-negative integer or None, got {self.max_tries!r}"
            )

    @property
    def label(self) -> str:
        return self.opponent.label

    @classmethod
    def from_mapping(cls, data: dict) -> "SessionConfig":
        max_tries = data.get("max_tries", data.get("maxTries"))
        return cls(OpponentConfig.from_mapping(data), max_tries)

    @classmethod
    def coerce(cls, config) -> "SessionConfig":
        if config is None:
            return cls()
        if isinstance(config, cls):
            return config
        if isinstance(config, OpponentConfig):
            return cls(opponent=config)
        if isinstance(config, dict):
            return cls.from_mapping(config)
        raise ConfigurationError(f"Unsupported configuration type: {type(config).__name__}")

    def to_dict(self) -> dict:
        data = self.opponent.to_dict()
        data["max_tries"] = self.max_tries
        return data


@dataclass
class SessionState:
    player_score: int = 0
    opponent_score: int = 0
    ties: int = 0
    rounds_played: int = 0
    tries_remaining: Optional[int] = None
    phase: SessionPhase = SessionPhase.IDLE

    def to_dict(self) -> dict:
        return {
            "player_score": self.player_score,
            "opponent_score": self.opponent_score,
            "ties": self.ties,
            "rounds_played": self.rounds_played,
            "tries_remaining": self.tries_remaining,
            "phase": self.phase.value,
        }


@dataclass(frozen=True)
class RoundResult:
    """Everything the caller needs to announce a round."""
    round_number: int
    player_move: Move
    opponent_move: Move
    outcome: RoundOutcome
    player_score: int
    opponent_score: int
    tries_remaining: Optional[int]
    predicted: PredictionResult
    countered: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "round": self.round_number,
            "player_move": self.player_move.value,
            "opponent_move": self.opponent_move.value,
            "outcome": self.outcome.value,
            "player_score": self.player_score,
            "opponent_score": self.opponent_score,
            "tries_remaining": self.tries_remaining,
            "predicted": self.predicted.to_dict(),
            "countered": self.countered,
            "timestamp": self.timestamp.isoformat(),
        }


class GameSession:
    """One continuous play sequence with its own score, history and try counter.

    Everything that changes during a round changes inside ``submit_move``
    before it returns; callers may add their own reveal delay afterwards.
    The opponent decides from the history as it stood before the current
    move, so it never sees the move it is answering.
    """

    def __init__(
        self,
        config: Union[SessionConfig, OpponentConfig, dict, None] = None,
        rng: Optional[random.Random] = None,
        rules: RuleTable = DEFAULT_RULES,
    ):
        self.rng: random.Random = rng if rng is not None else random.Random()
        self.rules = rules
        self.config = SessionConfig()
        self.state = SessionState()
        self.history = HistoryLog()
        self.rounds: list[RoundResult] = []
        self.reset(config)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def exhausted(self) -> bool:
        return self.state.phase is SessionPhase.EXHAUSTED

    @property
    def player_score(self) -> int:
        return self.state.player_score

    @property
    def opponent_score(self) -> int:
        return self.state.opponent_score

    @property
    def tries_remaining(self) -> Optional[int]:
        return self.state.tries_remaining

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def reset(self, config=None):
        """Zero the scores, clear the history and apply `config`.

        Passing None keeps the current configuration. An invalid config
        raises ConfigurationError and leaves the session untouched.
        """
        new_config = self.config if config is None else SessionConfig.coerce(config)
        history = HistoryLog(new_config.opponent.history_capacity)

        self.config = new_config
        self.history = history
        self.rounds = []
        self.state = SessionState(tries_remaining=new_config.max_tries)
        self.state.phase = SessionPhase.AWAITING_MOVE
        if new_config.max_tries == 0:
            self.state.phase = SessionPhase.EXHAUSTED
        logger.debug("Session reset: %s, max_tries=%s", new_config.label, new_config.max_tries)

    def submit_move(self, move) -> RoundResult:
        """Play one round with the player's `move` and return the result.

        Raises InvalidMoveError for anything that is not one of the five
        moves and NoTriesRemainingError once the try limit is used up.
        Neither leaves any trace on the session.
        """
        try:
            player_move = Move.parse(move)
        except ValueError:
            logger.warning("Rejected invalid move %r", move)
            raise
        if self.exhausted:
            logger.warning("Rejected move %s: no tries left", player_move.value)
            raise NoTriesRemainingError(self.config.max_tries)

        decision = decide(self.history.all(), self.config.opponent, self.rng, self.rules)
        self.history.record(player_move)
        outcome = evaluate(player_move, decision.move, self.rules)

        state = self.state
        if outcome is RoundOutcome.WIN:
            state.player_score += 1
        elif outcome is RoundOutcome.LOSE:
            state.opponent_score += 1
        else:
            state.ties += 1
        state.rounds_played += 1
        if state.tries_remaining is not None:
            state.tries_remaining -= 1
        state.phase = SessionPhase.ROUND_RESOLVED

        result = RoundResult(
            round_number=state.rounds_played,
            player_move=player_move,
            opponent_move=decision.move,
            outcome=outcome,
            player_score=state.player_score,
            opponent_score=state.opponent_score,
            tries_remaining=state.tries_remaining,
            predicted=decision.prediction,
            countered=decision.countered,
        )
        self.rounds.append(result)

        if state.tries_remaining is not None and state.tries_remaining <= 0:
            state.phase = SessionPhase.EXHAUSTED
        else:
            state.phase = SessionPhase.AWAITING_MOVE

        logger.debug(
            "Round %d: player=%s opponent=%s -> %s (predicted=%s, countered=%s)",
            result.round_number, player_move.value, decision.move.value, outcome.value,
            decision.prediction.predicted_move.value if decision.prediction.predicted_move else None,
            decision.countered,
        )
        return result

    def get_history(self) -> tuple:
        return self.history.all()

    def configure(self, **options):
        """Reset with the current configuration updated by `options`."""
        opponent = OpponentConfig.from_mapping(options, base=self.config.opponent)
        max_tries = options.get("max_tries", options.get("maxTries", self.config.max_tries))
        self.reset(SessionConfig(opponent, max_tries))

    def to_dict(self) -> dict:
        return {
            "config": self.config.to_dict(),
            "state": self.state.to_dict(),
            "history": [m.value for m in self.history],
        }

    def __repr__(self):
        return (f"<GameSession {self.config.label} "
                f"{self.state.player_score}-{self.state.opponent_score} {self.phase.value}>")
