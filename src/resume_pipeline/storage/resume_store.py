"""SQLite store for generated resumes and saved resume structures."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from resume_pipeline.models.resume import GeneratedResume
from resume_pipeline.models.structure import ResumeStructure

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".resume-pipeline" / "library.db"


class ResumeStore:
    """Generated resumes are written once; only the download location is ever filled in later."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS generated_resumes (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    target_company TEXT NOT NULL,
                    target_role TEXT NOT NULL,
                    markdown TEXT NOT NULL,
                    docx_url TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS resume_structures (
                    user_id TEXT PRIMARY KEY,
                    structure_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    # -- generated resumes --

    def create(self, resume: GeneratedResume) -> GeneratedResume:
        """Insert a new record. Raises sqlite3.IntegrityError if the id already exists."""
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO generated_resumes
                   (id, user_id, target_company, target_role, markdown, docx_url, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    resume.id,
                    resume.user_id,
                    resume.target_company,
                    resume.target_role,
                    resume.markdown,
                    resume.docx_url,
                    resume.created_at.isoformat(),
                ),
            )
        return resume

    def get(self, user_id: str, resume_id: str) -> GeneratedResume | None:
        """Fetch a resume only if it belongs to ``user_id``."""
        with self._connect() as conn:
            row = conn.execute(
                """SELECT id, user_id, target_company, target_role, markdown, docx_url, created_at
                   FROM generated_resumes WHERE id = ? AND user_id = ?""",
                (resume_id, user_id),
            ).fetchone()
        return self._row_to_resume(row) if row else None

    def list_for_user(self, user_id: str, limit: int = 50) -> list[GeneratedResume]:
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT id, user_id, target_company, target_role, markdown, docx_url, created_at
                   FROM generated_resumes WHERE user_id = ?
                   ORDER BY created_at DESC LIMIT ?""",
                (user_id, limit),
            ).fetchall()
        return [self._row_to_resume(row) for row in rows]

    def set_docx_url(self, user_id: str, resume_id: str, docx_url: str) -> bool:
        """Record the download location. Returns False if one was already set."""
        with self._connect() as conn:
            cursor = conn.execute(
                """UPDATE generated_resumes SET docx_url = ?
                   WHERE id = ? AND user_id = ? AND docx_url IS NULL""",
                (docx_url, resume_id, user_id),
            )
            updated = cursor.rowcount == 1
        if updated:
            logger.info("Recorded document location for resume %s", resume_id)
        return updated

    @staticmethod
    def _row_to_resume(row: tuple) -> GeneratedResume:
        return GeneratedResume(
            id=row[0],
            user_id=row[1],
            target_company=row[2],
            target_role=row[3],
            markdown=row[4],
            docx_url=row[5],
            created_at=datetime.fromisoformat(row[6]),
        )

    # -- resume structure preferences --

    def get_structure(self, user_id: str) -> ResumeStructure | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT structure_json FROM resume_structures WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        return ResumeStructure.model_validate_json(row[0]) if row else None

    def save_structure(self, user_id: str, structure: ResumeStructure) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO resume_structures
                   (user_id, structure_json, updated_at) VALUES (?, ?, ?)""",
                (user_id, structure.model_dump_json(by_alias=True), datetime.now().isoformat()),
            )
