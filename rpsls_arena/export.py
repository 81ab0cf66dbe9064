"""Export a session's round log to JSON or CSV."""

import json
import csv
from datetime import datetime, timezone
from pathlib import Path
from .errors import ConfigurationError
from .stats import session_summary

EXPORT_LIMIT = 100


def build_export(session, limit: int = EXPORT_LIMIT) -> dict:
    """Latest `limit` rounds (newest first) plus the session config and summary."""
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
        raise ConfigurationError(f"limit must be a non-negative integer, got {limit!r}")
    return {
        "created": datetime.now(timezone.utc).isoformat(),
        "config": session.config.to_dict(),
        "summary": session_summary(session),
        "rounds": [r.to_dict() for r in reversed(session.rounds)][:limit],
    }


def export_json(session, path: str, limit: int = EXPORT_LIMIT):
    """Export the round log to a JSON file."""
    data = build_export(session, limit)

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w") as f:
        json.dump(data, f, indent=2)
    print(f"  ✓ History exported to {out}")
    return out


def export_csv(session, path: str):
    """Export the full round log to a CSV file, oldest round first."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "round", "timestamp", "player_move", "opponent_move", "outcome",
        "player_score", "opponent_score", "tries_remaining",
        "predicted_move", "confidence", "countered",
    ]

    with open(out, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for r in session.rounds:
            row = r.to_dict()
            predicted = row.pop("predicted")
            row["predicted_move"] = predicted["predicted_move"] or ""
            row["confidence"] = predicted["confidence"]
            writer.writerow(row)
    print(f"  ✓ Round log exported to {out}")
    return out
