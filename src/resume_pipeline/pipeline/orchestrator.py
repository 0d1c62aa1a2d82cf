"""ResumePipeline: match, generate and render stages over the library stores."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from resume_pipeline.clients.llm_client import LLMClient
from resume_pipeline.config import AppConfig
from resume_pipeline.errors import (
    DependencyFailure,
    FetchError,
    NotFoundError,
    PipelineError,
    StageResult,
    StorageWriteError,
    ValidationError,
)
from resume_pipeline.matching.engine import MatchingEngine
from resume_pipeline.matching.scorers import build_scorer
from resume_pipeline.models.context import RequestContext
from resume_pipeline.models.match import RankedMatch
from resume_pipeline.models.profile import SuccessProfile
from resume_pipeline.models.resume import GeneratedResume
from resume_pipeline.models.structure import ResumeStructure
from resume_pipeline.parsers.markup_parser import MarkupParser
from resume_pipeline.pipeline.markdown_synthesizer import MarkdownSynthesizer
from resume_pipeline.pipeline.structure_resolver import ResumeStructureResolver
from resume_pipeline.storage.library_store import LibraryStore
from resume_pipeline.storage.resume_store import ResumeStore
from resume_pipeline.templates.docx_renderer import DocxRenderer
from resume_pipeline.utils.filenames import download_path, resume_filename

logger = logging.getLogger(__name__)

DEFAULT_STRUCTURE_MESSAGE = (
    "Generated with the default section layout. Save a resume structure to customize it."
)


class ResumePipeline:
    """Runs each stage for one acting user and reports a StageResult.

    Pipeline errors never cross a stage boundary; they come back as a failed
    result carrying the error type and a user-facing message.
    """

    def __init__(
        self,
        library: LibraryStore,
        resumes: ResumeStore,
        engine: MatchingEngine,
        *,
        output_dir: str | Path,
        public_root: str = "/resumes",
    ):
        self.library = library
        self.resumes = resumes
        self.engine = engine
        self.output_dir = Path(output_dir)
        self.public_root = public_root
        self.resolver = ResumeStructureResolver()
        self.synthesizer = MarkdownSynthesizer()
        self.parser = MarkupParser()
        self.renderer = DocxRenderer()

    @classmethod
    def from_config(cls, config: AppConfig, llm: LLMClient | None = None) -> ResumePipeline:
        db_path = config.storage.resolved_db_path
        return cls(
            LibraryStore(db_path),
            ResumeStore(db_path),
            MatchingEngine(build_scorer(config, llm)),
            output_dir=config.output.resolved_resumes_dir,
            public_root=config.output.public_root,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def match(self, ctx: RequestContext, profile: SuccessProfile | dict | str) -> StageResult:
        """Rank the user's accomplishments and tagged library entries against a profile."""

        async def run():
            accomplishments, entries = await self._fetch(
                ctx, self.library.get_accomplishments, self.library.get_library_entries
            )
            return await self.engine.match(profile, [*accomplishments, *entries])

        return await self._stage("match", run)

    async def get_structure(self, ctx: RequestContext) -> StageResult:
        async def run():
            saved = await self._fetch_one(ctx, self.resumes.get_structure)
            return self.resolver.resolve(saved)

        return await self._stage("get_structure", run)

    async def save_structure(self, ctx: RequestContext, structure: ResumeStructure | dict) -> StageResult:
        async def run():
            if structure is None:
                raise ValidationError("structure", "must not be empty")
            resolved = self.resolver.resolve(structure).structure
            await self._write(self.resumes.save_structure, ctx.user_id, resolved)
            return resolved

        return await self._stage("save_structure", run)

    async def generate(
        self,
        ctx: RequestContext,
        target_company: str,
        target_role: str,
        matches: list[RankedMatch | dict],
        summary: str | None = None,
    ) -> StageResult:
        """Synthesize markup from matches and persist it as a new generated resume.

        ``summary`` overrides the user's saved professional summary.
        """

        async def run():
            if not target_company or not target_company.strip():
                raise ValidationError("target_company", "must not be empty")
            if not target_role or not target_role.strip():
                raise ValidationError("target_role", "must not be empty")

            skills, education, contact, saved_summary, saved_structure = await self._fetch(
                ctx,
                self.library.get_skills,
                self.library.get_education,
                self.library.get_contact,
                self.library.get_summary,
                self.resumes.get_structure,
            )
            if contact is None:
                raise ValidationError("contact", "add contact details before generating a resume")

            resolution = self.resolver.resolve(saved_structure)
            markdown = self.synthesizer.synthesize(
                matches,
                skills,
                education,
                contact,
                resolution.structure,
                summary_text=summary if summary is not None else saved_summary,
            )
            record = GeneratedResume(
                user_id=ctx.user_id,
                target_company=target_company.strip(),
                target_role=target_role.strip(),
                markdown=markdown,
            )
            await self._write(self.resumes.create, record)
            logger.info("Generated resume %s for %s", record.id, target_company)

            data = {
                "resumeId": record.id,
                "markdown": markdown,
                "structureConfirmed": resolution.confirmed,
            }
            if not resolution.confirmed:
                data["message"] = DEFAULT_STRUCTURE_MESSAGE
            return data

        return await self._stage("generate", run)

    async def render(self, ctx: RequestContext, resume_id: str) -> StageResult:
        """Render a stored resume to .docx and record its download location once."""

        async def run():
            record = await self._fetch_one(ctx, self.resumes.get, resume_id)
            if record is None:
                raise NotFoundError(f"Resume {resume_id} not found")
            if record.docx_url:
                return {"resumeId": record.id, "docxUrl": record.docx_url}

            data = self.parser.parse(record.markdown)
            filename = resume_filename(data.name, record.target_company, record.target_role)
            await asyncio.to_thread(self.renderer.write, data, self.output_dir / filename)

            url = download_path(self.public_root, filename)
            recorded = await self._write(self.resumes.set_docx_url, ctx.user_id, resume_id, url)
            if not recorded:
                # another render recorded its location first; that one stands
                record = await self._fetch_one(ctx, self.resumes.get, resume_id)
                url = record.docx_url
            return {"resumeId": resume_id, "docxUrl": url, "filename": filename}

        return await self._stage("render", run)

    async def render_markup(self, markup: str, output_path: str | Path) -> StageResult:
        """Render externally supplied markup straight to a file."""

        async def run():
            data = self.parser.parse(markup)
            path = await asyncio.to_thread(self.renderer.write, data, output_path)
            return {"path": str(path)}

        return await self._stage("render_markup", run)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _stage(name: str, run: Callable[[], Awaitable[Any]]) -> StageResult:
        try:
            return StageResult.ok(await run())
        except DependencyFailure as e:
            logger.exception("%s failed: %s", name, e.message)
            return StageResult.fail(e)
        except PipelineError as e:
            logger.warning("%s rejected: %s", name, e.message)
            return StageResult.fail(e)

    @staticmethod
    async def _fetch(ctx: RequestContext, *readers: Callable[[str], Any]) -> list:
        """Run user-scoped store reads concurrently."""
        try:
            return await asyncio.gather(*(asyncio.to_thread(r, ctx.user_id) for r in readers))
        except sqlite3.Error as e:
            raise FetchError(f"library read failed: {e}") from e

    @staticmethod
    async def _fetch_one(ctx: RequestContext, reader: Callable[..., Any], *args) -> Any:
        try:
            return await asyncio.to_thread(reader, ctx.user_id, *args)
        except sqlite3.Error as e:
            raise FetchError(f"library read failed: {e}") from e

    @staticmethod
    async def _write(writer: Callable[..., Any], *args) -> Any:
        try:
            return await asyncio.to_thread(writer, *args)
        except sqlite3.Error as e:
            raise StorageWriteError(f"write failed: {e}") from e
