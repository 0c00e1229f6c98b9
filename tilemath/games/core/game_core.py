# tilemath/games/core/game_core.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_id"

# ============================================================
# Shared in-memory session store (per server process)
# ============================================================

SESSIONS: Dict[str, Dict[str, Any]] = {}
"""
key: session_id (cookie + optional client_id) -> per-session dict (see default_state()).
Nothing is persisted; a restart forgets every session.
"""


def default_state() -> Dict[str, Any]:
    """
    A neutral per-session state for any arcade game.
    Individual blueprints add their own keys (the tile puzzle adds
    "puzzle" and "playflow").
    """
    return {
        "stats": {
            "played": 0,
            "solved": 0,
            "timed_out": 0,
            "answer_attempts": 0,
            "answer_correct": 0,
            "answer_wrong": 0,
            "points": 0,
        },
        "counted_this_puzzle": False,   # first-interaction gate
    }


def stats_payload(state: Dict[str, Any]) -> Dict[str, Any]:
    s = state.get("stats", {})
    return {
        "played": int(s.get("played", 0)),
        "solved": int(s.get("solved", 0)),
        "timed_out": int(s.get("timed_out", 0)),
        "answer_attempts": int(s.get("answer_attempts", 0)),
        "answer_correct": int(s.get("answer_correct", 0)),
        "answer_wrong": int(s.get("answer_wrong", 0)),
        "points": int(s.get("points", 0)),
    }


# ============================================================
# Session & identity helpers
# ============================================================

def get_or_create_session_id(req) -> str:
    """
    Stable per-user (and optionally per-tab) session key:
      cookie 'session_id' (if present) else a new uuid4,
      optionally suffixed with ':<client_id>' (arg/body/header) to isolate tabs.
    """
    base = req.cookies.get(SESSION_COOKIE) or str(uuid.uuid4())

    client = req.args.get("client_id")
    if not client and req.is_json:
        j = req.get_json(silent=True) or {}
        client = j.get("client_id")
    if not client:
        client = req.headers.get("X-Client-Session")

    if client:
        return f"{base}:{str(client)[:64]}"
    return base


def cookie_base(session_id: str) -> str:
    return session_id.split(":", 1)[0]


def get_state(session_id: str) -> Dict[str, Any]:
    return SESSIONS.setdefault(session_id, default_state())


def drop_state(session_id: str) -> Optional[Dict[str, Any]]:
    dropped = SESSIONS.pop(session_id, None)
    logger.debug("drop_state sid=%s existed=%s", session_id, dropped is not None)
    return dropped


# ============================================================
# Stats bumpers
# ============================================================

def reset_puzzle_flags(state: Dict[str, Any]) -> None:
    state["counted_this_puzzle"] = False


def bump_played_once(state: Dict[str, Any]) -> None:
    """Call on every interaction; counts the puzzle as played on the first one only."""
    if not state.get("counted_this_puzzle"):
        st = state.setdefault("stats", {})
        st["played"] = int(st.get("played", 0)) + 1
        state["counted_this_puzzle"] = True


def bump_attempt(state: Dict[str, Any], correct: bool) -> None:
    st = state.setdefault("stats", {})
    st["answer_attempts"] = int(st.get("answer_attempts", 0)) + 1
    key = "answer_correct" if correct else "answer_wrong"
    st[key] = int(st.get(key, 0)) + 1


def bump_solved(state: Dict[str, Any], points: int = 0) -> None:
    st = state.setdefault("stats", {})
    st["solved"] = int(st.get("solved", 0)) + 1
    st["points"] = int(st.get("points", 0)) + int(points)


def bump_timed_out(state: Dict[str, Any]) -> None:
    st = state.setdefault("stats", {})
    st["timed_out"] = int(st.get("timed_out", 0)) + 1
