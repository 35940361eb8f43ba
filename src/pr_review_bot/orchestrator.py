"""
Review Orchestrator

Main interface that drives the complete review of a pull request,
from diff retrieval to the published review comment.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .config import AppConfig
from .diff.parser import UnifiedDiffParser
from .github.auth import GitHubAppAuth
from .github.client import GitHubClient
from .github.publisher import ReviewPublisher
from .llm.client import OllamaClient
from .llm.engine import LLMReviewEngine
from .models.chunk import ChangeChunk
from .models.finding import Finding
from .models.pull_request import PullRequestContext
from .review.heuristics import HeuristicsAnalysisEngine
from .review.merger import FindingMerger
from .review.rules import RuleRegistry, default_rules
from .webhook.payload import PullRequestEvent


logger = logging.getLogger(__name__)


@dataclass
class ReviewResult:
    """Outcome of one pull request review."""
    review_id: str
    repository: str
    pr_number: int
    status: str  # 'completed', 'skipped', 'failed'
    findings: List[Finding]
    processing_time: float
    metadata: Dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)


class ReviewOrchestrator:
    """
    Drives the review pipeline.

    1. Build the PR context and fetch the diff
    2. Parse the diff into change chunks
    3. Run heuristics and LLM review concurrently (each behind a switch)
    4. Merge and rank findings; publish once both branches are done
    """

    def __init__(
        self,
        github_client: GitHubClient,
        diff_parser: UnifiedDiffParser,
        heuristics_engine: HeuristicsAnalysisEngine,
        llm_engine: LLMReviewEngine,
        finding_merger: FindingMerger,
        review_publisher: ReviewPublisher,
        config: Optional[AppConfig] = None
    ):
        self.github_client = github_client
        self.diff_parser = diff_parser
        self.heuristics_engine = heuristics_engine
        self.llm_engine = llm_engine
        self.finding_merger = finding_merger
        self.review_publisher = review_publisher
        self.config = config or AppConfig()

    @property
    def llm_enabled(self) -> bool:
        return self.config.app.llm_enabled and self.config.llm.enabled

    async def process_pull_request(self, event: PullRequestEvent) -> ReviewResult:
        """
        Review a pull request and publish the result.

        Never raises: failures are logged and reported in the result.

        Args:
            event: Validated ``pull_request`` webhook event

        Returns:
            ReviewResult of the run
        """
        start_time = datetime.now()
        review_id = str(uuid.uuid4())
        repository = f"{event.repository.owner.login}/{event.repository.name}"
        pr_number = event.pull_request.number

        logger.info(f"Starting PR review {review_id} for {repository}#{pr_number}")

        try:
            pr_context = event.to_context()
            return await self._review(review_id, pr_context, start_time)

        except Exception as e:
            logger.error(f"Error processing PR review {review_id} for {repository}#{pr_number}", exc_info=True)
            return ReviewResult(
                review_id=review_id,
                repository=repository,
                pr_number=pr_number,
                status="failed",
                findings=[],
                processing_time=self._elapsed(start_time),
                metadata={'error': str(e)},
                created_at=start_time
            )

    async def _review(self, review_id: str, pr_context: PullRequestContext, start_time: datetime) -> ReviewResult:
        diff = await asyncio.to_thread(
            self.github_client.fetch_diff,
            pr_context.owner,
            pr_context.repo,
            pr_context.pr_number,
            pr_context.installation_id
        )

        diff_size = len(diff.encode('utf-8'))
        if diff_size > self.config.app.max_diff_size_bytes:
            logger.warning(
                f"Skipping review of {pr_context.full_name}#{pr_context.pr_number}: "
                f"diff is {diff_size} bytes (limit {self.config.app.max_diff_size_bytes})"
            )
            return ReviewResult(
                review_id=review_id,
                repository=pr_context.full_name,
                pr_number=pr_context.pr_number,
                status="skipped",
                findings=[],
                processing_time=self._elapsed(start_time),
                metadata={'reason': 'diff_too_large', 'diff_size_bytes': diff_size},
                created_at=start_time
            )

        chunks = await asyncio.to_thread(self.diff_parser.parse, diff)
        logger.info(f"Parsed {len(chunks)} change chunks")
        chunks = self._limit_files(chunks)

        heuristic_findings, llm_findings = await asyncio.gather(
            self._run_heuristics(chunks),
            self._run_llm(pr_context, chunks)
        )

        ranked = self.finding_merger.merge_and_rank(heuristic_findings + llm_findings)
        logger.info(f"Final {len(ranked)} findings after deduplication and ranking")

        await asyncio.to_thread(self.review_publisher.publish_review, pr_context, ranked)

        processing_time = self._elapsed(start_time)
        logger.info(f"Review {review_id} published for {pr_context.full_name}#{pr_context.pr_number} ({processing_time:.2f}s)")

        return ReviewResult(
            review_id=review_id,
            repository=pr_context.full_name,
            pr_number=pr_context.pr_number,
            status="completed",
            findings=ranked,
            processing_time=processing_time,
            metadata={
                'chunks_analyzed': len(chunks),
                'files_analyzed': len({chunk.file_path for chunk in chunks}),
                'heuristic_findings': len(heuristic_findings),
                'llm_findings': len(llm_findings),
            },
            created_at=start_time
        )

    async def _run_heuristics(self, chunks: List[ChangeChunk]) -> List[Finding]:
        if not self.config.app.heuristics_enabled:
            logger.debug("Heuristics analysis disabled")
            return []

        try:
            findings = await asyncio.to_thread(self.heuristics_engine.analyze, chunks)
        except Exception:
            logger.warning("Error in heuristics analysis", exc_info=True)
            return []

        logger.info(f"Heuristics found {len(findings)} findings")
        return findings

    async def _run_llm(self, pr_context: PullRequestContext, chunks: List[ChangeChunk]) -> List[Finding]:
        if not self.llm_enabled:
            logger.debug("LLM analysis disabled")
            return []

        try:
            findings = await self.llm_engine.analyze_with_llm(pr_context, chunks)
        except Exception:
            logger.warning("Error in LLM analysis", exc_info=True)
            return []

        logger.info(f"LLM found {len(findings)} findings")
        return findings

    def _limit_files(self, chunks: List[ChangeChunk]) -> List[ChangeChunk]:
        """Keep chunks of the first ``max_files_per_pr`` files."""
        max_files = self.config.app.max_files_per_pr
        allowed = []
        for chunk in chunks:
            if chunk.file_path not in allowed:
                allowed.append(chunk.file_path)

        if len(allowed) <= max_files:
            return chunks

        logger.warning(f"Limiting review to {max_files} of {len(allowed)} changed files")
        kept = set(allowed[:max_files])
        return [chunk for chunk in chunks if chunk.file_path in kept]

    def _elapsed(self, start_time: datetime) -> float:
        return (datetime.now() - start_time).total_seconds()


def build_orchestrator(config: AppConfig) -> ReviewOrchestrator:
    """
    Wire the orchestrator and its collaborators from configuration.

    Loads the GitHub App private key, so configuration errors surface
    here, before any review runs.
    """
    auth = GitHubAppAuth.from_config(config.github)
    auth.load_private_key()

    github_client = GitHubClient(
        token_provider=auth.token_for,
        base_url=config.github.api_url,
        timeout_seconds=config.github.timeout_seconds
    )

    llm_client = OllamaClient(config.llm)
    if config.app.llm_enabled and config.llm.enabled and not llm_client.is_available():
        logger.warning(f"LLM service at {config.llm.base_url} is not reachable; LLM findings will be empty")

    return ReviewOrchestrator(
        github_client=github_client,
        diff_parser=UnifiedDiffParser(),
        heuristics_engine=HeuristicsAnalysisEngine(RuleRegistry(default_rules())),
        llm_engine=LLMReviewEngine(llm_client),
        finding_merger=FindingMerger(),
        review_publisher=ReviewPublisher(
            github_client,
            delete_previous=config.app.enable_comment_deletion
        ),
        config=config
    )
