import json
import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

from symptomrelay.errors import PersistenceFailure
from symptomrelay.logger import get_logger, preview
from symptomrelay.models.analysis import AnalysisResult, StructuredResult

logger = get_logger(__name__)

DB_PATH = Path("symptomrelay.db")

_COLUMNS = "id, user_id, symptoms, severity, risk_level, analysis_result, created_at"


class AnalysisStore:
    """SQLite store of symptom analyses, one immutable row per analysis."""

    def __init__(self, db_path: Union[str, Path] = DB_PATH):
        self.db_path = Path(db_path)
        self._init_db()
        logger.debug(f"AnalysisStore initialized with db: {self.db_path}")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection that commits on success and is always closed."""
        with closing(sqlite3.connect(self.db_path)) as conn:
            with conn:
                yield conn

    def _init_db(self):
        """Initialize the database table."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS analyses (
                        id TEXT PRIMARY KEY,
                        user_id TEXT NOT NULL,
                        symptoms TEXT NOT NULL,
                        severity TEXT NOT NULL,
                        risk_level TEXT NOT NULL,
                        analysis_result TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                    """
                )
                conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_analyses_user_symptoms "
                    "ON analyses(user_id, symptoms)"
                )
                conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_analyses_user_created "
                    "ON analyses(user_id, created_at)"
                )
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize analysis store at {self.db_path}: {e}")
            raise PersistenceFailure() from e

    def find_by_symptoms(self, caller_id: str, symptoms: str) -> Optional[AnalysisResult]:
        """Return the caller's newest analysis for exactly this symptom text.

        The match is byte-exact: no trimming, no case folding.
        """
        try:
            with self._connect() as conn:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM analyses "
                    "WHERE user_id = ? AND symptoms = ? "
                    "ORDER BY created_at DESC, rowid DESC LIMIT 1",
                    (caller_id, symptoms),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Reuse lookup failed for user {caller_id}: {e}")
            raise PersistenceFailure() from e

        if row is None:
            logger.debug(f"No stored analysis for user {caller_id}: '{preview(symptoms)}'")
            return None
        return self._row_to_result(row)

    def insert(self, result: AnalysisResult):
        """Insert one analysis row."""
        try:
            with self._connect() as conn:
                conn.execute(
                    f"INSERT INTO analyses ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        result.id,
                        result.caller_id,
                        result.symptoms,
                        result.severity,
                        result.risk_level,
                        result.structured_result.model_dump_json(),
                        result.created_at.isoformat(timespec="microseconds"),
                    ),
                )
        except sqlite3.Error as e:
            logger.error(f"Failed to store analysis {result.id}: {e}")
            raise PersistenceFailure("Failed to store analysis") from e
        logger.info(f"Stored analysis {result.id} for user {result.caller_id}")

    def list_for_user(self, caller_id: str, limit: int = 50) -> List[AnalysisResult]:
        """Return the caller's analyses, newest first."""
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM analyses WHERE user_id = ? "
                    "ORDER BY created_at DESC, rowid DESC LIMIT ?",
                    (caller_id, limit),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"History lookup failed for user {caller_id}: {e}")
            raise PersistenceFailure() from e
        return [self._row_to_result(row) for row in rows]

    def get(self, analysis_id: str) -> Optional[AnalysisResult]:
        """Fetch one analysis by id."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM analyses WHERE id = ?", (analysis_id,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Lookup of analysis {analysis_id} failed: {e}")
            raise PersistenceFailure() from e
        return self._row_to_result(row) if row else None

    def _row_to_result(self, row) -> AnalysisResult:
        try:
            return AnalysisResult(
                id=row[0],
                caller_id=row[1],
                symptoms=row[2],
                severity=row[3],
                risk_level=row[4],
                structured_result=StructuredResult(**json.loads(row[5])),
                created_at=datetime.fromisoformat(row[6]),
            )
        except ValueError as e:
            # pydantic.ValidationError and json.JSONDecodeError are both ValueErrors
            logger.error(f"Stored analysis {row[0]} could not be parsed: {e}")
            raise PersistenceFailure() from e
