"""Pipeline orchestration: collect repository context, cache it, generate documents."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import partial
from pathlib import Path
from typing import Dict, Optional, Sequence

from .config import DEFAULT_CACHE_TTL, DEFAULT_COMMIT_LIMIT, Settings
from .debug import DebugSink, NullDebugSink, debug_sink_for
from .git.history import CommitHistoryCollector
from .llm.base import GenerationClient
from .llm.cache import obtain_cache
from .llm.gemini import GeminiClient
from .logging import get_logger
from .models import RepositoryContext
from .prompting.context import ContextAssembler
from .prompting.templates import PromptLibrary
from .repo_scanner import RepoCollector
from .strategies import DEFAULT_STRATEGIES, DocumentStrategy, evaluation_strategy, run_strategy

DEFAULT_BRANCH = "HEAD"
CONTEXT_MIME_TYPE = "text/plain"


@dataclass
class AnalysisRequest:
    """Inputs for one documentation run over a local repository."""

    project_path: str
    include_tests: bool = False
    target_language: Optional[str] = None


@dataclass
class DocumentationResult:
    """Generated documents keyed by document label, evaluation last."""

    documents: Dict[str, str] = field(default_factory=dict)


class Orchestrator:
    """Coordinates context collection and concurrent document generation."""

    def __init__(
        self,
        client: GenerationClient,
        *,
        collector: RepoCollector | None = None,
        history_collector: CommitHistoryCollector | None = None,
        assembler: ContextAssembler | None = None,
        prompts: PromptLibrary | None = None,
        strategies: Sequence[DocumentStrategy] = DEFAULT_STRATEGIES,
        commit_limit: int = DEFAULT_COMMIT_LIMIT,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL,
        debug_sink: DebugSink | None = None,
    ) -> None:
        self.client = client
        self.debug_sink = debug_sink or NullDebugSink()
        self.collector = collector or RepoCollector(debug_sink=self.debug_sink)
        self.history_collector = history_collector or CommitHistoryCollector()
        self.assembler = assembler or ContextAssembler()
        self.prompts = prompts or PromptLibrary(debug_sink=self.debug_sink)
        self.strategies = tuple(strategies)
        self.commit_limit = commit_limit
        self.cache_ttl_seconds = cache_ttl_seconds
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_settings(
        cls, settings: Settings, *, client: GenerationClient | None = None
    ) -> "Orchestrator":
        sink = debug_sink_for(settings)
        return cls(
            client or GeminiClient.from_settings(settings, debug_sink=sink),
            prompts=PromptLibrary(settings.prompts_dir, debug_sink=sink),
            commit_limit=settings.commit_limit,
            cache_ttl_seconds=settings.cache_ttl_seconds,
            debug_sink=sink,
        )

    async def analyze(self, request: AnalysisRequest) -> DocumentationResult:
        """Generate every document for ``request.project_path``.

        Raises ``FileNotFoundError`` when the path does not exist. Individual
        strategy failures are reported inline and never raised.
        """
        repo_path = Path(request.project_path).expanduser().resolve()
        if not repo_path.exists():
            raise FileNotFoundError(f"Project path does not exist: {repo_path}")
        if not repo_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {repo_path}")

        self.logger.info("Starting analysis for %s", repo_path)
        context = await self.build_context(repo_path, include_tests=request.include_tests)
        payload = self.assembler.assemble_context(context)
        self.debug_sink.write("repository_context", payload, extension="xml")

        cache = await obtain_cache(
            self.client,
            payload,
            mime_type=CONTEXT_MIME_TYPE,
            ttl_seconds=self.cache_ttl_seconds,
        )

        results = await asyncio.gather(
            *(
                run_strategy(
                    strategy,
                    prompts=self.prompts,
                    client=self.client,
                    cache=cache,
                    target_language=request.target_language,
                )
                for strategy in self.strategies
            )
        )
        documents: Dict[str, str] = dict(results)

        label, content = await run_strategy(
            evaluation_strategy(documents),
            prompts=self.prompts,
            client=self.client,
            cache=cache,
            target_language=request.target_language,
        )
        documents[label] = content
        self.logger.info("Generated %d documents for %s", len(documents), repo_path)
        return DocumentationResult(documents=documents)

    async def build_context(self, repo_path: Path, *, include_tests: bool = False) -> RepositoryContext:
        """Collect files, tree and history concurrently into a RepositoryContext."""
        loop = asyncio.get_running_loop()
        files, tree, history = await asyncio.gather(
            loop.run_in_executor(None, partial(self.collector.collect_files, repo_path, include_tests)),
            loop.run_in_executor(None, self.collector.collect_directory_structure, repo_path),
            loop.run_in_executor(
                None, partial(self.history_collector.collect, repo_path, self.commit_limit)
            ),
        )
        self.logger.debug(
            "Collected %d files, %d commits, %d hotspots",
            len(files),
            len(history.commits),
            len(history.hotspots),
        )

        # The newest commit time keeps the payload, and thus the cache key, stable across runs.
        if history.commits:
            timestamp = history.commits[0].author_time
        else:
            timestamp = datetime.now(UTC).isoformat()

        return RepositoryContext(
            project_name=repo_path.name or "Repository",
            timestamp=timestamp,
            branch=DEFAULT_BRANCH,
            directory_tree=tree,
            files=tuple(files),
            hotspots=history.hotspots,
            commits=history.commits,
        )


__all__ = ["AnalysisRequest", "DocumentationResult", "Orchestrator"]
