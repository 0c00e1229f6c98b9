# tilemath/games/core/playflow.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from time import time

Outcome = str  # 'solved'|'timed_out'|'abandoned'


def _now_ms() -> int:
    return int(time() * 1000)


@dataclass
class RoundRecord:
    round_no: int
    cells: Tuple[int, ...] = ()
    started_at_ms: int = field(default_factory=_now_ms)
    ended_at_ms: Optional[int] = None
    attempts: int = 0
    invalid_attempts: int = 0
    points: int = 0
    final_outcome: Optional[Outcome] = None

    def mark_end(self, outcome: Outcome):
        if self.ended_at_ms is None:
            self.ended_at_ms = _now_ms()
        self.final_outcome = outcome


@dataclass
class Playflow:
    """Round-by-round history of one session."""
    session_uuid: str
    started_at_ms: int = field(default_factory=_now_ms)
    current: Optional[RoundRecord] = None
    rounds: List[RoundRecord] = field(default_factory=list)

    # ---- lifecycle ----
    def start_round(self, round_no: int, cells: Tuple[int, ...] = ()):
        # a round left hanging by a new deal counts as abandoned
        if self.current and not self.current.final_outcome:
            self.current.mark_end('abandoned')
        rec = RoundRecord(round_no=round_no, cells=tuple(cells))
        self.rounds.append(rec)
        self.current = rec

    def submit(self, accepted: bool, points: int = 0):
        if not self.current or self.current.final_outcome:
            return
        self.current.attempts += 1
        if accepted:
            self.current.points = int(points)
            self.current.mark_end('solved')
        else:
            self.current.invalid_attempts += 1

    def time_out(self):
        if not self.current or self.current.final_outcome:
            return
        self.current.mark_end('timed_out')

    # ---- readout ----
    def summary(self) -> Dict:
        totals = dict(rounds=len(self.rounds), solved=0, timed_out=0, abandoned=0,
                      attempts=0, invalid_attempts=0, points=0)
        per_round: List[Dict] = []
        for rec in self.rounds:
            if rec.final_outcome in ('solved', 'timed_out', 'abandoned'):
                totals[rec.final_outcome] += 1
            totals['attempts'] += rec.attempts
            totals['invalid_attempts'] += rec.invalid_attempts
            totals['points'] += rec.points
            per_round.append(dict(
                round_no=rec.round_no,
                cells=list(rec.cells),
                final_outcome=rec.final_outcome,
                attempts=rec.attempts,
                invalid_attempts=rec.invalid_attempts,
                points=rec.points,
                started_at_ms=rec.started_at_ms,
                ended_at_ms=rec.ended_at_ms,
            ))

        def f(outcome: str) -> str:
            ids = [r.round_no for r in self.rounds if r.final_outcome == outcome]
            return ", ".join(str(x) for x in ids) if ids else "—"

        report_lines = [
            "Totals",
            f"  Rounds:    {totals['rounds']}",
            f"  Solved:    {totals['solved']}",
            f"  Timed out: {totals['timed_out']}",
            f"  Points:    {totals['points']}",
            "",
            "Rounds",
            f"  Solved [{totals['solved']}]: {f('solved')}",
            f"  Timed out [{totals['timed_out']}]: {f('timed_out')}",
            f"  Abandoned [{totals['abandoned']}]: {f('abandoned')}",
        ]

        return dict(
            session_uuid=self.session_uuid,
            started_at_ms=self.started_at_ms,
            ended_at_ms=_now_ms(),
            totals=totals,
            per_round=per_round,
            report_text="\n".join(report_lines),
        )
