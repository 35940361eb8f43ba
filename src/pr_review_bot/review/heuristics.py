"""
Heuristics Analysis Engine

Runs every registered rule against every change chunk. Chunks are
scanned in parallel on a bounded thread pool; rules run one after
another within a chunk.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..models.chunk import ChangeChunk
from ..models.finding import Finding
from .rules import RuleRegistry


logger = logging.getLogger(__name__)


class HeuristicsAnalysisEngine:
    """
    Applies the rule registry to change chunks.

    A rule that raises is logged and contributes no findings for that
    chunk; it never aborts the analysis.
    """

    def __init__(self, registry: RuleRegistry, max_workers: Optional[int] = None):
        """
        Initialize heuristics engine.

        Args:
            registry: Rules to apply
            max_workers: Upper bound of parallel chunk scans
                (default: number of CPU cores)
        """
        self.registry = registry
        self.max_workers = max_workers or os.cpu_count() or 1

    def analyze(self, chunks: List[ChangeChunk]) -> List[Finding]:
        """
        Analyze chunks with all rules.

        Args:
            chunks: Change chunks to scan

        Returns:
            Findings of all rules for all chunks
        """
        logger.debug(f"Starting heuristics analysis on {len(chunks)} chunks")

        if not chunks:
            return []

        workers = min(len(chunks), self.max_workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="heuristics") as executor:
            per_chunk = list(executor.map(self._analyze_chunk, chunks))

        findings = [finding for chunk_findings in per_chunk for finding in chunk_findings]
        logger.debug(f"Heuristics analysis produced {len(findings)} findings")
        return findings

    def _analyze_chunk(self, chunk: ChangeChunk) -> List[Finding]:
        """Run rules sequentially over one chunk."""
        findings = []

        for rule in self.registry:
            try:
                rule_findings = rule.analyze(chunk)
            except Exception:
                logger.warning(f"Error executing rule {rule.name} on {chunk.file_path}", exc_info=True)
                continue

            findings.extend(rule_findings)
            if rule_findings:
                logger.debug(f"Rule {rule.name} found {len(rule_findings)} findings in {chunk.file_path}")

        return findings
