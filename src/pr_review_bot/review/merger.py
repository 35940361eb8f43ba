"""
Finding Merger

Deduplicates findings from both engines and ranks them for
presentation.
"""

import logging
from typing import Dict, List

from ..models.finding import Finding, Severity


logger = logging.getLogger(__name__)


def dedup_key(finding: Finding) -> str:
    """Findings sharing this key describe the same problem."""
    return f"{finding.file_path}:{finding.line_number}:{finding.category}"


def sort_key(finding: Finding):
    """Precedence, then severity, then confidence; all descending."""
    return (-finding.precedence_score, -Severity.rank(finding.severity), -finding.confidence)


class FindingMerger:
    """
    Merges and ranks findings.

    Pure and deterministic: for equal keys the first finding wins unless
    a later one has strictly higher confidence. The sort is stable over
    arrival order, where a replacing finding counts from its own arrival.
    """

    def merge_and_rank(self, findings: List[Finding]) -> List[Finding]:
        """
        Deduplicate and sort findings.

        Args:
            findings: Findings in arrival order

        Returns:
            One finding per dedup key, most important first
        """
        logger.debug(f"Merging and ranking {len(findings)} findings")

        merged: Dict[str, Finding] = {}
        for finding in findings:
            key = dedup_key(finding)
            existing = merged.get(key)
            if existing is None or finding.confidence > existing.confidence:
                # a replacement ranks from its own arrival position on full ties
                merged.pop(key, None)
                merged[key] = finding

        ranked = sorted(merged.values(), key=sort_key)
        logger.debug(f"Kept {len(ranked)} findings after deduplication")
        return ranked
