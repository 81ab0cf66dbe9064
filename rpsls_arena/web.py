"""Flask JSON API around game sessions.

The browser front end owns rendering, sounds and reveal delays; it only
calls in here to create a session, submit moves and read the log back.
"""

import logging
import random
import threading
import uuid
from collections import OrderedDict
from flask import Flask, request, jsonify

from .errors import ConfigurationError, InvalidMoveError, NoTriesRemainingError
from .export import EXPORT_LIMIT, build_export
from .policy import DIFFICULTY_PRESETS
from .predictors import ALL_PREDICTOR_CLASSES
from .session import GameSession, SessionConfig
from .stats import format_prediction_hint, session_summary

logger = logging.getLogger(__name__)

app = Flask(__name__)
# Least recently used sessions are dropped beyond this many
app.config.setdefault("MAX_SESSIONS", 1000)

_sessions: "OrderedDict[str, GameSession]" = OrderedDict()
_sessions_lock = threading.Lock()


class SessionNotFound(KeyError):
    pass


def _get_session(session_id: str) -> GameSession:
    with _sessions_lock:
        try:
            session = _sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None
        _sessions.move_to_end(session_id)
        return session


def _store_session(session_id: str, session: GameSession):
    with _sessions_lock:
        _sessions[session_id] = session
        while len(_sessions) > app.config["MAX_SESSIONS"]:
            evicted, _ = _sessions.popitem(last=False)
            logger.info("Evicted idle session %s", evicted)


def _session_payload(session_id: str, session: GameSession) -> dict:
    payload = session.to_dict()
    payload["id"] = session_id
    payload["summary"] = session_summary(session)
    return payload


def _json_body() -> dict:
    """The request's JSON object; a missing body counts as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Request body must be a JSON object, got {type(data).__name__}")
    return data


def _split_seed(data: dict):
    """Pull the optional RNG seed out of a request body."""
    data = dict(data)
    seed = data.pop("seed", None)
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ConfigurationError(f"seed must be an integer or null, got {seed!r}")
    return seed, data


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

@app.errorhandler(InvalidMoveError)
def _invalid_move(exc):
    return jsonify({"error": "invalid_move", "message": str(exc)}), 400


@app.errorhandler(ConfigurationError)
def _bad_config(exc):
    return jsonify({"error": "configuration", "message": str(exc)}), 400


@app.errorhandler(NoTriesRemainingError)
def _no_tries(exc):
    return jsonify({"error": "no_tries_remaining", "message": str(exc)}), 409


@app.errorhandler(SessionNotFound)
def _not_found(exc):
    return jsonify({"error": "not_found", "message": f"Unknown session: {exc.args[0]}"}), 404


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

@app.route("/api/difficulties")
def api_difficulties():
    return jsonify(DIFFICULTY_PRESETS)


@app.route("/api/predictors")
def api_predictors():
    return jsonify([cls.name for cls in ALL_PREDICTOR_CLASSES])


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@app.route("/api/session", methods=["POST"])
def api_create_session():
    seed, options = _split_seed(_json_body())
    config = SessionConfig.from_mapping(options)

    session = GameSession(config, rng=random.Random(seed))
    session_id = uuid.uuid4().hex
    _store_session(session_id, session)
    logger.info("Created session %s (%s)", session_id, config.label)
    return jsonify(_session_payload(session_id, session)), 201


@app.route("/api/session/<session_id>")
def api_get_session(session_id):
    session = _get_session(session_id)
    return jsonify(_session_payload(session_id, session))


@app.route("/api/session/<session_id>", methods=["DELETE"])
def api_delete_session(session_id):
    with _sessions_lock:
        if _sessions.pop(session_id, None) is None:
            raise SessionNotFound(session_id)
    return "", 204


@app.route("/api/session/<session_id>/move", methods=["POST"])
def api_submit_move(session_id):
    session = _get_session(session_id)
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidMoveError(data)

    with _sessions_lock:
        result = session.submit_move(data.get("move"))
        phase = session.phase

    payload = result.to_dict()
    payload["hint"] = format_prediction_hint(result.predicted)
    payload["phase"] = phase.value
    return jsonify(payload)


@app.route("/api/session/<session_id>/reset", methods=["POST"])
def api_reset_session(session_id):
    session = _get_session(session_id)
    seed, options = _split_seed(_json_body())

    with _sessions_lock:
        session.reset(SessionConfig.from_mapping(options) if options else None)
        if seed is not None:
            session.rng = random.Random(seed)
    return jsonify(_session_payload(session_id, session))


@app.route("/api/session/<session_id>/history")
def api_history(session_id):
    session = _get_session(session_id)
    return jsonify({"history": [m.value for m in session.get_history()]})


@app.route("/api/session/<session_id>/export")
def api_export(session_id):
    session = _get_session(session_id)
    limit = request.args.get("limit", EXPORT_LIMIT, type=int)
    return jsonify(build_export(session, limit))


def main():
    print("\n🎮 RPSLS Arena API")
    print("  → http://localhost:5000/api/difficulties\n")
    app.run(debug=True, port=5000)


if __name__ == "__main__":
    main()
