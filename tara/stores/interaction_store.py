from __future__ import annotations
import sqlite3, json, asyncio
from datetime import datetime
from typing import List, Optional
from ..config import settings
from ..models.interaction import InteractionRecord, FeedbackUpdate, as_utc

INIT_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS interactions(
  id                  TEXT PRIMARY KEY,
  question            TEXT NOT NULL,
  answer              TEXT NOT NULL,
  language            TEXT NOT NULL,
  subject             TEXT,
  grade               INTEGER,
  user_rating         REAL,
  user_feedback       TEXT,
  was_helpful         INTEGER,
  retry_count         INTEGER NOT NULL DEFAULT 0,
  flagged_for_review  INTEGER NOT NULL DEFAULT 0,
  concept_difficulty  TEXT,
  response_time       REAL,
  tokens_used         INTEGER,
  response_quality    REAL,
  quality_metrics     TEXT,
  time_spent_reading  REAL,
  audio_played_to_end INTEGER,
  voice_interrupted   INTEGER,
  timestamp           TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_interactions_ts ON interactions(timestamp);
"""

COLUMNS = (
    "id", "question", "answer", "language", "subject", "grade", "user_rating", "user_feedback",
    "was_helpful", "retry_count", "flagged_for_review", "concept_difficulty", "response_time",
    "tokens_used", "response_quality", "quality_metrics", "time_spent_reading",
    "audio_played_to_end", "voice_interrupted", "timestamp",
)
_BOOL_COLS = {"was_helpful", "flagged_for_review", "audio_played_to_end", "voice_interrupted"}

# feedback fields are written once; later submissions never overwrite them
FEEDBACK_SQL = """
UPDATE interactions SET
  user_rating         = COALESCE(user_rating, ?),
  user_feedback       = COALESCE(user_feedback, ?),
  was_helpful         = COALESCE(was_helpful, ?),
  flagged_for_review  = MAX(flagged_for_review, ?),
  time_spent_reading  = COALESCE(time_spent_reading, ?),
  audio_played_to_end = COALESCE(audio_played_to_end, ?),
  voice_interrupted   = COALESCE(voice_interrupted, ?)
WHERE id = ?
"""

def _ts(dt: datetime) -> str:
    # fixed-width UTC so lexical order == chronological order
    return as_utc(dt).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")

def _to_row(r: InteractionRecord) -> tuple:
    d = r.model_dump()
    d["quality_metrics"] = json.dumps(d["quality_metrics"]) if d["quality_metrics"] is not None else None
    d["timestamp"] = _ts(r.timestamp)
    for k in _BOOL_COLS:
        if d[k] is not None:
            d[k] = int(d[k])
    return tuple(d[c] for c in COLUMNS)

def _from_row(row: tuple) -> InteractionRecord:
    d = dict(zip(COLUMNS, row))
    if d["quality_metrics"]:
        try:
            d["quality_metrics"] = json.loads(d["quality_metrics"])
        except json.JSONDecodeError:
            d["quality_metrics"] = None
    for k in _BOOL_COLS:
        if d[k] is not None:
            d[k] = bool(d[k])
    d["timestamp"] = datetime.fromisoformat(d["timestamp"])
    return InteractionRecord(**d)

def _opt_int(v: Optional[bool]) -> Optional[int]:
    return None if v is None else int(v)

class InteractionStore:
    """sqlite-backed persistence for interaction records."""

    def __init__(self, path: str | None = None):
        self.path = path or settings.db_path
        with sqlite3.connect(self.path) as c:
            c.executescript(INIT_SQL)

    async def create(self, record: InteractionRecord) -> InteractionRecord:
        row = _to_row(record)
        def _t():
            with sqlite3.connect(self.path) as c:
                c.execute(
                    f"INSERT INTO interactions({','.join(COLUMNS)}) VALUES({','.join('?' * len(COLUMNS))})",
                    row,
                )
        await asyncio.to_thread(_t)
        return record

    async def get(self, interaction_id: str) -> Optional[InteractionRecord]:
        def _t():
            with sqlite3.connect(self.path) as c:
                return c.execute(
                    f"SELECT {','.join(COLUMNS)} FROM interactions WHERE id=?", (interaction_id,)
                ).fetchone()
        row = await asyncio.to_thread(_t)
        return _from_row(row) if row else None

    async def update_feedback(self, interaction_id: str, fb: FeedbackUpdate) -> Optional[InteractionRecord]:
        """
        Merge user feedback into a record. Returns the stored record, or None
        if no record has that id.
        """
        params = (
            fb.user_rating,
            fb.user_feedback,
            _opt_int(fb.was_helpful),
            int(bool(fb.flagged_for_review)),
            fb.time_spent_reading,
            _opt_int(fb.audio_played_to_end),
            _opt_int(fb.voice_interrupted),
            interaction_id,
        )
        def _t():
            with sqlite3.connect(self.path) as c:
                return c.execute(FEEDBACK_SQL, params).rowcount
        n = await asyncio.to_thread(_t)
        if not n:
            return None
        return await self.get(interaction_id)

    async def list_since(self, start: Optional[datetime] = None) -> List[InteractionRecord]:
        def _t():
            with sqlite3.connect(self.path) as c:
                if start is None:
                    return c.execute(f"SELECT {','.join(COLUMNS)} FROM interactions ORDER BY timestamp").fetchall()
                return c.execute(
                    f"SELECT {','.join(COLUMNS)} FROM interactions WHERE timestamp >= ? ORDER BY timestamp",
                    (_ts(start),),
                ).fetchall()
        rows = await asyncio.to_thread(_t)
        return [_from_row(r) for r in rows]

    async def list_all(self) -> List[InteractionRecord]:
        return await self.list_since(None)
