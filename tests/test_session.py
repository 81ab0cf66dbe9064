"""Tests for the game session state machine and scripted matches."""

import random

import pytest

from rpsls_arena.engine import DEFAULT_RULES, Move, RoundOutcome, evaluate, run_match
from rpsls_arena.errors import ConfigurationError, InvalidMoveError, NoTriesRemainingError
from rpsls_arena.players import AlwaysRock, Cycle, PureRandom
from rpsls_arena.policy import OpponentConfig
from rpsls_arena.session import GameSession, SessionConfig, SessionPhase

R, P, S = Move.ROCK, Move.PAPER, Move.SCISSORS


def make_session(seed=0, **options):
    return GameSession(options or None, rng=random.Random(seed))


# ── Lifecycle ──────────────────────────────────────────────


def test_new_session_awaits_move():
    session = make_session()
    assert session.phase is SessionPhase.AWAITING_MOVE
    assert session.player_score == 0
    assert session.opponent_score == 0
    assert session.tries_remaining is None
    assert session.get_history() == ()


def test_max_tries_exhaustion_and_reset():
    session = make_session(max_tries=2)
    session.submit_move("rock")
    second = session.submit_move("paper")
    assert second.tries_remaining == 0
    assert session.phase is SessionPhase.EXHAUSTED

    with pytest.raises(NoTriesRemainingError):
        session.submit_move("rock")
    assert len(session.get_history()) == 2

    session.reset()
    assert session.phase is SessionPhase.AWAITING_MOVE
    assert session.player_score == 0
    assert session.opponent_score == 0
    assert session.tries_remaining == 2
    assert session.get_history() == ()
    session.submit_move("spock")
    assert session.tries_remaining == 1


def test_zero_max_tries_starts_exhausted():
    session = make_session(max_tries=0)
    assert session.exhausted
    with pytest.raises(NoTriesRemainingError):
        session.submit_move("rock")


def test_invalid_move_leaves_session_untouched():
    session = make_session(max_tries=3)
    session.submit_move("rock")
    before = (session.get_history(), session.player_score, session.opponent_score, session.tries_remaining)
    with pytest.raises(InvalidMoveError):
        session.submit_move("banana")
    after = (session.get_history(), session.player_score, session.opponent_score, session.tries_remaining)
    assert before == after
    assert len(session.rounds) == 1


def test_bad_reset_config_leaves_session_untouched():
    session = make_session(max_tries=5)
    session.submit_move("rock")
    with pytest.raises(ConfigurationError):
        session.reset({"order": 7})
    assert session.get_history() == (R,)
    assert session.tries_remaining == 4


def test_negative_max_tries_rejected():
    with pytest.raises(ConfigurationError):
        SessionConfig(max_tries=-1)


# ── Rounds ─────────────────────────────────────────────────


def test_scores_follow_outcomes():
    session = make_session(seed=11)
    for move in [R, P, S, R, P, S, R, R]:
        result = session.submit_move(move)
        assert result.outcome is evaluate(move, result.opponent_move)
    outcomes = [r.outcome for r in session.rounds]
    assert session.player_score == outcomes.count(RoundOutcome.WIN)
    assert session.opponent_score == outcomes.count(RoundOutcome.LOSE)
    assert session.state.ties == outcomes.count(RoundOutcome.TIE)
    assert session.state.rounds_played == 8


def test_opponent_does_not_see_current_move():
    """The prediction is made from the history before the submitted move is recorded."""
    session = make_session(order=1, weight=1.0)
    first = session.submit_move(R)
    second = session.submit_move(R)
    third = session.submit_move(R)
    assert first.predicted.predicted_move is None
    assert second.predicted.predicted_move is None
    assert third.predicted.predicted_move is R
    assert third.countered
    assert third.opponent_move in DEFAULT_RULES.counters_of(R)
    assert third.outcome is RoundOutcome.LOSE


def test_get_history_is_idempotent():
    session = make_session()
    session.submit_move("lizard")
    session.submit_move("spock")
    assert session.get_history() == session.get_history() == (Move.LIZARD, Move.SPOCK)


def test_history_capacity_applies():
    session = make_session(history_capacity=3)
    for move in [R, P, S, R, P]:
        session.submit_move(move)
    assert session.get_history() == (S, R, P)
    assert session.state.rounds_played == 5


def test_reset_with_new_config():
    session = make_session()
    session.submit_move("rock")
    session.reset({"difficulty": "easy", "maxTries": 3})
    assert not session.config.opponent.enabled
    assert session.config.max_tries == 3
    assert session.tries_remaining == 3
    assert session.get_history() == ()


def test_reset_accepts_opponent_config():
    session = make_session()
    session.reset(OpponentConfig(strategy="frequency"))
    assert session.config.opponent.strategy == "frequency"
    assert session.config.max_tries is None


def test_configure_updates_current_config():
    session = make_session(max_tries=10, order=3)
    session.submit_move("rock")
    session.configure(weight=0.5)
    assert session.config.opponent.order == 3
    assert session.config.opponent.weight == 0.5
    assert session.config.max_tries == 10
    assert session.get_history() == ()


def test_round_result_to_dict():
    session = make_session(max_tries=4)
    data = session.submit_move("paper").to_dict()
    assert data["round"] == 1
    assert data["player_move"] == "paper"
    assert data["tries_remaining"] == 3
    assert data["outcome"] in ("win", "lose", "tie")
    assert data["predicted"]["predicted_move"] is None


def test_same_seed_same_game():
    moves = [R, P, S, R, P, S, R, P]
    s1, s2 = make_session(seed=8), make_session(seed=8)
    assert [s1.submit_move(m).opponent_move for m in moves] == [s2.submit_move(m).opponent_move for m in moves]


# ── Scripted matches ───────────────────────────────────────


def test_expert_crushes_always_rock():
    session = make_session(difficulty="expert")
    result = run_match(AlwaysRock(), session, rounds=100, seed=1)
    assert result.rounds == 100
    # history of 4+ rocks gives a certain prediction and weight 1.0 always counters
    assert result.opponent_wins >= 96


def test_order_one_learns_cycle():
    session = make_session(order=1, weight=1.0)
    result = run_match(Cycle(), session, rounds=50, seed=2)
    # rounds 3-6 fall back to frequency; from round 7 the cycle is known
    assert result.predictions_made == 48
    assert result.predictions_correct == 45
    assert result.opponent_wins >= 44


def test_match_stops_when_tries_run_out():
    session = make_session(max_tries=10)
    result = run_match(PureRandom(), session, rounds=50, seed=3)
    assert result.rounds == 10
    assert session.exhausted
