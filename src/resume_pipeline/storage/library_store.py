"""SQLite store for a user's career library: roles, accomplishments, entries, skills."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import date
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from resume_pipeline.errors import ValidationError
from resume_pipeline.models.library import (
    Accomplishment,
    ContactDetails,
    Education,
    LibraryEntry,
    Role,
    Skill,
)

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".resume-pipeline" / "library.db"


class LibraryStore:
    """User-scoped library records. Every read takes the acting user's id."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS roles (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    company TEXT NOT NULL,
                    title TEXT NOT NULL,
                    location TEXT,
                    start_date TEXT,
                    end_date TEXT,
                    summary TEXT
                );
                CREATE TABLE IF NOT EXISTS accomplishments (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    role_id TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
                    text TEXT NOT NULL,
                    tags_json TEXT NOT NULL DEFAULT '[]'
                );
                CREATE TABLE IF NOT EXISTS library_entries (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    type TEXT NOT NULL,
                    title TEXT NOT NULL,
                    subtitle TEXT,
                    date TEXT,
                    location TEXT,
                    url TEXT,
                    bullets_json TEXT NOT NULL DEFAULT '[]',
                    tags_json TEXT NOT NULL DEFAULT '[]'
                );
                CREATE TABLE IF NOT EXISTS skills (
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    category TEXT,
                    level TEXT,
                    PRIMARY KEY (user_id, name)
                );
                CREATE TABLE IF NOT EXISTS education (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    institution TEXT NOT NULL,
                    degree TEXT NOT NULL,
                    field TEXT,
                    location TEXT,
                    start_date TEXT,
                    end_date TEXT,
                    gpa TEXT,
                    honors TEXT,
                    activities_json TEXT NOT NULL DEFAULT '[]'
                );
                CREATE TABLE IF NOT EXISTS contacts (
                    user_id TEXT PRIMARY KEY,
                    full_name TEXT NOT NULL,
                    email TEXT NOT NULL,
                    phone TEXT,
                    location TEXT,
                    linkedin_url TEXT,
                    portfolio_url TEXT,
                    github_url TEXT,
                    headline TEXT
                );
                CREATE TABLE IF NOT EXISTS summaries (
                    user_id TEXT PRIMARY KEY,
                    text TEXT NOT NULL
                );
            """)

    # -- roles and accomplishments --

    def add_role(self, user_id: str, role: Role) -> None:
        """Insert a role and its accomplishments (replacing a role with the same id)."""
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO roles
                   (id, user_id, company, title, location, start_date, end_date, summary)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    role.id, user_id, role.company, role.title, role.location,
                    _iso(role.start_date), _iso(role.end_date), role.summary,
                ),
            )
            for acc in role.accomplishments:
                conn.execute(
                    """INSERT OR REPLACE INTO accomplishments
                       (id, user_id, role_id, text, tags_json) VALUES (?, ?, ?, ?, ?)""",
                    (acc.id, user_id, role.id, acc.text, json.dumps(acc.tags)),
                )

    def update_accomplishment(self, user_id: str, acc_id: str, text: str, tags: list[str]) -> bool:
        """Text and tags are the only mutable parts of an accomplishment."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE accomplishments SET text = ?, tags_json = ? WHERE id = ? AND user_id = ?",
                (text, json.dumps(tags), acc_id, user_id),
            )
            return cursor.rowcount == 1

    def get_accomplishments(self, user_id: str) -> list[Accomplishment]:
        """All accomplishments with role fields denormalized, current roles first."""
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT a.id, a.role_id, r.company, r.title, r.location,
                          r.start_date, r.end_date, a.text, a.tags_json, r.summary
                   FROM accomplishments a JOIN roles r ON a.role_id = r.id
                   WHERE a.user_id = ?
                   ORDER BY COALESCE(r.end_date, '9999-12-31') DESC,
                            r.start_date DESC, r.rowid, a.rowid""",
                (user_id,),
            ).fetchall()
        return [
            Accomplishment(
                id=row[0],
                role_id=row[1],
                company=row[2],
                title=row[3],
                location=row[4],
                start_date=_date(row[5]),
                end_date=_date(row[6]),
                text=row[7],
                tags=json.loads(row[8]),
                role_summary=row[9],
            )
            for row in rows
        ]

    def get_roles(self, user_id: str) -> list[Role]:
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT id, company, title, location, start_date, end_date, summary
                   FROM roles WHERE user_id = ?
                   ORDER BY COALESCE(end_date, '9999-12-31') DESC, start_date DESC, rowid""",
                (user_id,),
            ).fetchall()
        roles = {
            r[0]: Role(
                id=r[0], company=r[1], title=r[2], location=r[3],
                start_date=_date(r[4]), end_date=_date(r[5]), summary=r[6],
            )
            for r in rows
        }
        for acc in self.get_accomplishments(user_id):
            roles[acc.role_id].accomplishments.append(acc)
        return list(roles.values())

    # -- library entries --

    def add_library_entry(self, user_id: str, entry: LibraryEntry) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO library_entries
                   (id, user_id, type, title, subtitle, date, location, url, bullets_json, tags_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    entry.id, user_id, entry.type, entry.title, entry.subtitle, entry.date,
                    entry.location, entry.url, json.dumps(entry.bullets), json.dumps(entry.tags),
                ),
            )

    def get_library_entries(self, user_id: str) -> list[LibraryEntry]:
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT id, type, title, subtitle, date, location, url, bullets_json, tags_json
                   FROM library_entries WHERE user_id = ? ORDER BY rowid""",
                (user_id,),
            ).fetchall()
        return [
            LibraryEntry(
                id=row[0], type=row[1], title=row[2], subtitle=row[3], date=row[4],
                location=row[5], url=row[6], bullets=json.loads(row[7]), tags=json.loads(row[8]),
            )
            for row in rows
        ]

    # -- skills, education, contact, summary --

    def upsert_skill(self, user_id: str, skill: Skill) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO skills (user_id, name, category, level) VALUES (?, ?, ?, ?)
                   ON CONFLICT(user_id, name) DO UPDATE SET
                       category = excluded.category, level = excluded.level""",
                (user_id, skill.name, skill.category, skill.level),
            )

    def get_skills(self, user_id: str) -> list[Skill]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT name, category, level FROM skills WHERE user_id = ? ORDER BY rowid",
                (user_id,),
            ).fetchall()
        return [Skill(name=r[0], category=r[1], level=r[2]) for r in rows]

    def add_education(self, user_id: str, edu: Education) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO education
                   (user_id, institution, degree, field, location, start_date, end_date,
                    gpa, honors, activities_json)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    user_id, edu.institution, edu.degree, edu.field, edu.location,
                    _iso(edu.start_date), _iso(edu.end_date), edu.gpa, edu.honors,
                    json.dumps(edu.activities),
                ),
            )

    def get_education(self, user_id: str) -> list[Education]:
        """Most recent first."""
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT institution, degree, field, location, start_date, end_date,
                          gpa, honors, activities_json
                   FROM education WHERE user_id = ?
                   ORDER BY COALESCE(end_date, '9999-12-31') DESC, id""",
                (user_id,),
            ).fetchall()
        return [
            Education(
                institution=r[0], degree=r[1], field=r[2], location=r[3],
                start_date=_date(r[4]), end_date=_date(r[5]), gpa=r[6], honors=r[7],
                activities=json.loads(r[8]),
            )
            for r in rows
        ]

    def set_contact(self, user_id: str, contact: ContactDetails) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO contacts
                   (user_id, full_name, email, phone, location, linkedin_url,
                    portfolio_url, github_url, headline)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    user_id, contact.full_name, contact.email, contact.phone, contact.location,
                    contact.linkedin_url, contact.portfolio_url, contact.github_url,
                    contact.headline,
                ),
            )

    def get_contact(self, user_id: str) -> ContactDetails | None:
        with self._connect() as conn:
            row = conn.execute(
                """SELECT full_name, email, phone, location, linkedin_url,
                          portfolio_url, github_url, headline
                   FROM contacts WHERE user_id = ?""",
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return ContactDetails(
            full_name=row[0], email=row[1], phone=row[2], location=row[3],
            linkedin_url=row[4], portfolio_url=row[5], github_url=row[6], headline=row[7],
        )

    def set_summary(self, user_id: str, text: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO summaries (user_id, text) VALUES (?, ?)",
                (user_id, text),
            )

    def get_summary(self, user_id: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT text FROM summaries WHERE user_id = ?", (user_id,)
            ).fetchone()
        return row[0] if row else None

    # -- bulk import --

    def import_library(self, user_id: str, data: dict) -> dict[str, int]:
        """Load a whole library from its YAML/dict form.

        Expected keys (all optional): ``contact``, ``summary``, ``roles`` (each
        with nested ``accomplishments``), ``library_entries``, ``skills``,
        ``education``. Everything is validated before anything is written.
        Returns a count per record kind.
        """
        roles = [
            _validated(Role, _prepare_role(raw) if isinstance(raw, dict) else raw, f"roles.{i}")
            for i, raw in enumerate(data.get("roles") or [])
        ]
        entries = [
            _validated(
                LibraryEntry,
                {"id": str(uuid.uuid4()), **raw} if isinstance(raw, dict) else raw,
                f"library_entries.{i}",
            )
            for i, raw in enumerate(data.get("library_entries") or [])
        ]
        skills = [
            _validated(Skill, {"name": raw} if isinstance(raw, str) else raw, f"skills.{i}")
            for i, raw in enumerate(data.get("skills") or [])
        ]
        education = [
            _validated(Education, raw, f"education.{i}")
            for i, raw in enumerate(data.get("education") or [])
        ]
        contact = (
            _validated(ContactDetails, data["contact"], "contact") if data.get("contact") else None
        )

        for role in roles:
            self.add_role(user_id, role)
        for entry in entries:
            self.add_library_entry(user_id, entry)
        for skill in skills:
            self.upsert_skill(user_id, skill)
        for edu in education:
            self.add_education(user_id, edu)
        if contact is not None:
            self.set_contact(user_id, contact)
        if data.get("summary"):
            self.set_summary(user_id, str(data["summary"]).strip())

        counts = {
            "roles": len(roles),
            "accomplishments": sum(len(r.accomplishments) for r in roles),
            "library_entries": len(entries),
            "skills": len(skills),
            "education": len(education),
        }
        logger.info("Imported library for %s: %s", user_id, counts)
        return counts


def _prepare_role(raw: dict) -> dict:
    """Fill ids and the denormalized role fields into nested accomplishments."""
    role = {"id": str(uuid.uuid4()), **raw}
    role["accomplishments"] = [
        {
            "id": str(uuid.uuid4()),
            "role_id": role["id"],
            "company": role.get("company"),
            "title": role.get("title"),
            "location": role.get("location"),
            "start_date": role.get("start_date"),
            "end_date": role.get("end_date"),
            "role_summary": role.get("summary"),
            **acc,
        }
        for acc in raw.get("accomplishments") or []
    ]
    return role


def _validated(model, raw, field: str):
    if not isinstance(raw, dict):
        raise ValidationError(field, f"expected a mapping, got {type(raw).__name__}")
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, field) from e


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


def _date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None
