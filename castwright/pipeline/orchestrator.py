"""Pipeline orchestration for Castwright.

Responsibilities:
- Define the stage order for multi-file cast extraction: discover, extract, merge.
- Map fatal stage failures to `PipelineStageError` with actionable hints.
- Bind extraction and enrichment runs to a `PROJECT.md` document.

Key types:
- `CastExtractionPipeline`: orchestration facade.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Sequence, TypeVar

from ..casting.enricher import EnrichResult, VoiceDescriptionEnricher
from ..config import CastwrightConfig
from ..errors import MalformedResponseError, PipelineStageError, SourceReadError
from ..extraction.extractor import CharacterExtractor
from ..extraction.merger import CastMerger
from ..extraction.worker_pool import ExtractionWorkerPool, ProgressCallback
from ..io.discovery import discover_files
from ..io.project_file import ProjectDocument, ProjectFile
from ..llm.openai_client import OpenAIProviderError
from ..llm.query import QueryFunction
from ..models.datatypes import CastEntry, ExtractionReport, FileExtraction
from ..telemetry.logger import RunLogger

_StageResult = TypeVar("_StageResult")


class CastExtractionPipeline:
    """Coordinate discovery, concurrent extraction, and merging for one project."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Initialize optional runtime logging and per-file progress reporting."""

        self._run_logger = run_logger
        self._progress_callback = progress_callback

    async def extract_all(
        self,
        project_dir: Path,
        file_patterns: Sequence[str],
        query_fn: QueryFunction,
        prior_cast: Sequence[CastEntry] | None = None,
        *,
        concurrency: int = 4,
        token_budget: int = 2000,
    ) -> ExtractionReport:
        """Extract and merge characters from every screenplay under `project_dir`.

        Args:
            project_dir: Root directory searched for screenplay files.
            file_patterns: Discovery patterns such as `*.fountain`.
            query_fn: Async `(user_prompt, system_prompt) -> response` callable.
            prior_cast: Previously persisted cast whose entries are preserved.
            concurrency: Maximum number of files extracted in parallel.
            token_budget: Maximum estimated tokens per LLM request.

        Returns:
            Report with the merged cast and per-file outcomes in discovery order.

        Raises:
            PipelineStageError: On any non-recoverable failure, chained from
                its cause.
        """

        files = self._run_stage("discover", lambda: self._discover(project_dir, file_patterns))
        if not files:
            merged = self._run_stage("merge", lambda: CastMerger().merge([], prior_cast))
            return ExtractionReport(
                cast=tuple(merged), files=(), file_patterns=tuple(file_patterns)
            )

        self._on_stage_start("extract", files=len(files), concurrency=concurrency)
        try:
            outcomes = await self._extract(files, query_fn, concurrency, token_budget)
        except Exception as exc:
            self._on_stage_failure("extract", exc)
            raise
        self._on_stage_complete("extract", files=len(files))

        merged = self._run_stage(
            "merge",
            lambda: CastMerger().merge(
                [outcome.records for outcome in outcomes], prior_cast
            ),
        )
        return ExtractionReport(
            cast=tuple(merged),
            files=tuple(outcomes),
            file_patterns=tuple(file_patterns),
        )

    def run(
        self,
        config: CastwrightConfig,
        query_fn: QueryFunction,
    ) -> tuple[ProjectDocument, ExtractionReport]:
        """Run extraction for the configured project file.

        Returns:
            The project document with its merged cast applied, and the run report.
            The document is not written; callers decide based on `dry_run`.
        """

        project_file, document = self._load_project(config)
        patterns = config.file_patterns or self._resolve_patterns(document)
        report = asyncio.run(
            self.extract_all(
                project_file.discovery_root(document),
                patterns,
                query_fn,
                self._prior_cast(document),
                concurrency=config.concurrency,
                token_budget=config.token_budget,
            )
        )
        return document.with_cast(report.cast), report

    def run_enrichment(
        self,
        config: CastwrightConfig,
        query_fn: QueryFunction,
    ) -> tuple[ProjectDocument, EnrichResult]:
        """Fill missing voice descriptions for the configured project's cast."""

        _, document = self._load_project(config)
        cast = self._prior_cast(document)
        if not cast:
            raise PipelineStageError(
                stage="enrich",
                detail="No cast members found in project.",
                hint="Run `castwright extract` first to populate the cast list.",
            )

        self._on_stage_start("enrich", cast=len(cast))
        result = asyncio.run(
            VoiceDescriptionEnricher(run_logger=self._run_logger).enrich(
                cast, document.genre, query_fn
            )
        )
        self._on_stage_complete(
            "enrich", enriched=result.enriched_count, skipped=result.skipped_count
        )
        return document.with_cast(result.updated_cast), result

    def _load_project(self, config: CastwrightConfig) -> tuple[ProjectFile, ProjectDocument]:
        """Load the configured project file or raise a stage error."""

        project_file = ProjectFile(config.project_file)
        if not project_file.exists():
            raise PipelineStageError(
                stage="load",
                detail=f"Project file not found: {config.project_file}",
                hint="Pass `--project` with the path to your PROJECT.md file.",
            )
        try:
            return project_file, project_file.load()
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            raise PipelineStageError(
                stage="load",
                detail=f"Failed to read project file: {exc}",
                hint="Check the YAML front matter between the `---` lines.",
            ) from exc

    @staticmethod
    def _resolve_patterns(document: ProjectDocument) -> tuple[str, ...]:
        """Return front-matter file patterns or raise a stage error."""

        try:
            return document.resolved_file_patterns()
        except ValueError as exc:
            raise PipelineStageError(stage="load", detail=str(exc)) from exc

    @staticmethod
    def _prior_cast(document: ProjectDocument) -> list[CastEntry]:
        """Return the document's persisted cast or raise a stage error."""

        try:
            return document.cast()
        except ValueError as exc:
            raise PipelineStageError(
                stage="load",
                detail=str(exc),
                hint="Each cast entry needs at least a `character` key.",
            ) from exc

    @staticmethod
    def _discover(project_dir: Path, file_patterns: Sequence[str]) -> list[Path]:
        """Discover candidate screenplay files."""

        try:
            return discover_files(project_dir, file_patterns)
        except OSError as exc:
            raise PipelineStageError(
                stage="discover",
                detail=f"Failed to scan `{project_dir}`: {exc}",
                hint="Check `episodesDir` and directory permissions.",
            ) from exc

    async def _extract(
        self,
        files: list[Path],
        query_fn: QueryFunction,
        concurrency: int,
        token_budget: int,
    ) -> list[FileExtraction]:
        """Extract characters from all files with bounded concurrency."""

        extractor = CharacterExtractor(
            query_fn, token_budget=token_budget, run_logger=self._run_logger
        )
        pool: ExtractionWorkerPool[Path, list] = ExtractionWorkerPool(
            concurrency=concurrency,
            recoverable=(SourceReadError,),
            progress_callback=self._progress_callback,
            run_logger=self._run_logger,
        )
        try:
            results = await pool.run(files, extractor.extract_file, label=lambda path: path.name)
        except MalformedResponseError as exc:
            raise PipelineStageError(
                stage="extract",
                detail=str(exc),
                hint="The model did not return a JSON character array; try another `--model`.",
            ) from exc
        except OpenAIProviderError as exc:
            raise PipelineStageError(
                stage="extract",
                detail=str(exc),
                hint=(
                    "Verify `OPENAI_API_KEY` or `castwright credentials`, then confirm "
                    "the model/provider configuration."
                ),
            ) from exc
        except PipelineStageError:
            raise
        except Exception as exc:
            raise PipelineStageError(
                stage="extract",
                detail=f"Failed to extract characters: {exc}",
                hint="Check the query provider configuration.",
            ) from exc

        return [
            FileExtraction(path=result.item, records=tuple(result.value or ()))
            if result.succeeded
            else FileExtraction(
                path=result.item, status="read_failed", detail=str(result.error)
            )
            for result in results
        ]

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named synchronous stage and emit start/complete/failure events."""

        self._on_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            self._on_stage_failure(stage_name, exc)
            raise
        self._on_stage_complete(stage_name)
        return result

    def _on_stage_start(self, stage_name: str, **context: object) -> None:
        """Emit a stage-start log event when logging is enabled."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name, **context)

    def _on_stage_complete(self, stage_name: str, **context: object) -> None:
        """Emit a stage-complete log event when logging is enabled."""

        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name, **context)

    def _on_stage_failure(self, stage_name: str, exc: Exception) -> None:
        """Emit a stage-failure log event with the error type only."""

        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
