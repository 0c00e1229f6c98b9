# tilemath/games/tile_puzzle/routes.py
# JSON intent API for the tile puzzle. The board logic lives in .logic;
# this module only maps requests to intents and keeps session bookkeeping.
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from flask import current_app, jsonify, make_response, request

from tilemath import limiter
from tilemath.games.core.expression_utils import normalize_tile
from tilemath.games.core.game_core import (
    SESSIONS,
    SESSION_COOKIE,
    bump_attempt,
    bump_played_once,
    bump_solved,
    bump_timed_out,
    cookie_base,
    default_state,
    drop_state,
    get_or_create_session_id,
    get_state,
    reset_puzzle_flags,
    stats_payload,
)
from tilemath.games.core.playflow import Playflow
from . import bp
from .logic import PuzzleState, RoundRules, RoundStatus, dispatch, read_model

logger = logging.getLogger(__name__)

RULES_KEY = "tilemath.rules"
MAX_TICKS = 60


class BadPayload(ValueError):
    pass


# -----------------------------------------------------------------------------
# Small per-request helpers
# -----------------------------------------------------------------------------
def _sid() -> str:
    return get_or_create_session_id(request)


def _rules() -> RoundRules:
    rules = current_app.extensions.get(RULES_KEY)
    if rules is None:
        rules = RoundRules.from_config(current_app.config)
        current_app.extensions[RULES_KEY] = rules
    return rules


def _session(sid: str) -> Dict[str, Any]:
    st = get_state(sid)
    st.setdefault("playflow", Playflow(session_uuid=cookie_base(sid)))
    st.setdefault("puzzle", None)
    return st


def _data() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _int_field(data: Dict[str, Any], key: str) -> int:
    raw = data.get(key, request.args.get(key))
    if raw is None or isinstance(raw, bool):
        raise BadPayload(f"Missing or invalid '{key}'")
    if isinstance(raw, float) and not raw.is_integer():
        raise BadPayload(f"Missing or invalid '{key}'")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise BadPayload(f"Missing or invalid '{key}'") from None


def _respond(sid: str, st: Dict[str, Any], status: int = 200):
    puzzle: Optional[PuzzleState] = st.get("puzzle")
    body = {
        "ok": True,
        "state": read_model(puzzle) if puzzle is not None else None,
        "stats": stats_payload(st),
    }
    resp = make_response(jsonify(body), status)
    if not request.cookies.get(SESSION_COOKIE):
        resp.set_cookie(
            SESSION_COOKIE,
            cookie_base(sid),
            httponly=True,
            samesite="Lax",
            secure=bool(current_app.config.get("SESSION_COOKIE_SECURE")),
        )
    return resp


def _bad(reason: str):
    return jsonify({"ok": False, "reason": reason}), 400


# -----------------------------------------------------------------------------
# Intent application + bookkeeping
# -----------------------------------------------------------------------------
def _apply(st: Dict[str, Any], intent: str, **payload: Any) -> Tuple[PuzzleState, PuzzleState]:
    rules = _rules()
    before: Optional[PuzzleState] = st.get("puzzle")
    flow: Playflow = st["playflow"]

    if before is None and intent != "new_round":
        before = _start_round(st, None, rules)

    if intent == "new_round":
        after = _start_round(st, before, rules)
        return before or after, after

    after = dispatch(before, intent, rules, **payload)
    st["puzzle"] = after

    if intent in ("select", "place", "merge"):
        bump_played_once(st)
    elif intent == "validate" and before.timer.running:
        solved = after.status is RoundStatus.SOLVED
        bump_played_once(st)
        bump_attempt(st, correct=solved)
        flow.submit(solved, after.last_award)
        if solved:
            bump_solved(st, after.last_award)
    elif intent == "tick":
        if after.status is RoundStatus.TIMED_OUT and before.status is not RoundStatus.TIMED_OUT:
            bump_timed_out(st)
            flow.time_out()
    return before, after


def _start_round(st: Dict[str, Any], previous: Optional[PuzzleState], rules: RoundRules) -> PuzzleState:
    puzzle = dispatch(previous or PuzzleState(), "new_round", rules)
    st["puzzle"] = puzzle
    reset_puzzle_flags(st)
    st["playflow"].start_round(puzzle.round_no, puzzle.cells)
    return puzzle


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@bp.post("/api/new_round")
def api_new_round():
    sid = _sid()
    st = _session(sid)
    _, puzzle = _apply(st, "new_round")
    logger.info("sid=%s new round %s", sid, puzzle.round_no)
    return _respond(sid, st)


@bp.post("/api/select")
def api_select():
    sid = _sid()
    data = _data()
    tile = normalize_tile(data.get("tile", request.args.get("tile")))
    if tile is None:
        return _bad("Unknown tile")
    st = _session(sid)
    _apply(st, "select", tile=tile)
    return _respond(sid, st)


@bp.post("/api/place")
def api_place():
    sid = _sid()
    try:
        index = _int_field(_data(), "index")
    except BadPayload as exc:
        return _bad(str(exc))
    st = _session(sid)
    _apply(st, "place", index=index)
    return _respond(sid, st)


@bp.post("/api/merge")
def api_merge():
    sid = _sid()
    try:
        gap = _int_field(_data(), "gap")
    except BadPayload as exc:
        return _bad(str(exc))
    st = _session(sid)
    _apply(st, "merge", gap=gap)
    return _respond(sid, st)


@bp.post("/api/validate")
def api_validate():
    sid = _sid()
    st = _session(sid)
    _, after = _apply(st, "validate")
    logger.info(
        "sid=%s validate round=%s status=%s result=%r award=%s",
        sid, after.round_no, after.status.value, after.last_result, after.last_award,
    )
    return _respond(sid, st)


@bp.post("/api/tick")
@limiter.exempt
def api_tick():
    sid = _sid()
    data = _data()
    try:
        ticks = _int_field(data, "ticks") if "ticks" in data or "ticks" in request.args else 1
    except BadPayload as exc:
        return _bad(str(exc))
    ticks = max(1, min(MAX_TICKS, ticks))
    st = _session(sid)
    for _ in range(ticks):
        _apply(st, "tick")
    return _respond(sid, st)


@bp.get("/api/state")
@limiter.exempt
def api_state():
    sid = _sid()
    st = _session(sid)
    if st.get("puzzle") is None:
        _apply(st, "new_round")
    return _respond(sid, st)


@bp.route("/api/summary", methods=["GET", "POST"])
def api_summary():
    sid = _sid()
    # read-only: an unknown session gets an empty summary, not a new entry
    st = SESSIONS.get(sid) or default_state()
    flow = st.get("playflow") or Playflow(session_uuid=cookie_base(sid))
    summary = flow.summary()
    return jsonify({"ok": True, "summary": summary, "stats": stats_payload(st)}), 200


@bp.post("/api/restart")
def api_restart():
    sid = _sid()
    drop_state(sid)
    logger.info("sid=%s session restarted", sid)
    st = _session(sid)
    _apply(st, "new_round")
    return _respond(sid, st)
