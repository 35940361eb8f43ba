"""
Unit tests for finding deduplication and ranking.
"""

from pr_review_bot.models.finding import Finding, Severity, FindingSource
from pr_review_bot.review.merger import FindingMerger, dedup_key


def make_finding(
    file_path="file.java",
    line_number=10,
    category="TEST",
    severity=Severity.MEDIUM,
    confidence=0.5,
    precedence_score=100,
    message="msg",
    source=FindingSource.HEURISTIC,
):
    return Finding.create(
        file_path=file_path,
        line_number=line_number,
        severity=severity,
        category=category,
        message=message,
        source=source,
        confidence=confidence,
        precedence_score=precedence_score,
    )


class TestFindingMerger:
    """Unit tests for FindingMerger class."""

    def setup_method(self):
        self.merger = FindingMerger()

    def test_empty(self):
        """Test merging no findings."""
        assert self.merger.merge_and_rank([]) == []

    def test_keeps_higher_confidence(self):
        """Test that duplicates collapse to the most confident finding."""
        low = make_finding(confidence=0.5)
        high = make_finding(confidence=0.9)

        result = self.merger.merge_and_rank([low, high])

        assert len(result) == 1
        assert result[0].confidence == 0.9
        assert result[0] is high

    def test_first_wins_on_equal_confidence(self):
        """Test that the earlier finding is kept when confidences tie."""
        first = make_finding(message="first")
        second = make_finding(message="second")

        result = self.merger.merge_and_rank([first, second])

        assert [f.message for f in result] == ["first"]

    def test_replacing_finding_takes_its_own_arrival_position(self):
        """Test that a more confident duplicate ranks by its own arrival on full ties."""
        weak = make_finding(line_number=1, confidence=0.5, message="weak")
        other = make_finding(line_number=2, confidence=0.9, message="other")
        strong = make_finding(line_number=1, confidence=0.9, message="strong")

        result = self.merger.merge_and_rank([weak, other, strong])

        assert [f.message for f in result] == ["other", "strong"]

    def test_precedence_first(self):
        """Test that precedence decides the order."""
        low = make_finding(line_number=1, severity=Severity.LOW, precedence_score=100)
        critical = make_finding(line_number=2, severity=Severity.CRITICAL, precedence_score=200)

        result = self.merger.merge_and_rank([low, critical])

        assert [f.severity for f in result] == ["CRITICAL", "LOW"]

    def test_severity_then_confidence_break_ties(self):
        """Test severity and confidence as secondary sort keys."""
        medium = make_finding(line_number=1, severity=Severity.MEDIUM, confidence=0.9)
        high_unsure = make_finding(line_number=2, severity=Severity.HIGH, confidence=0.3)
        high_sure = make_finding(line_number=3, severity=Severity.HIGH, confidence=0.8)

        result = self.merger.merge_and_rank([medium, high_unsure, high_sure])

        assert [f.line_number for f in result] == [3, 2, 1]

    def test_different_categories_are_kept(self):
        """Test that the same location with different categories is not merged."""
        result = self.merger.merge_and_rank([
            make_finding(category="SECURITY"),
            make_finding(category="CODE_REVIEW"),
        ])

        assert len(result) == 2

    def test_llm_and_heuristic_duplicates(self):
        """Test merging across sources by location and category."""
        heuristic = make_finding(confidence=0.7, source=FindingSource.HEURISTIC)
        llm = make_finding(confidence=0.8, source=FindingSource.LLM)

        result = self.merger.merge_and_rank([heuristic, llm])

        assert [f.source for f in result] == ["LLM"]

    def test_dedup_key(self):
        """Test dedup key format."""
        assert dedup_key(make_finding()) == "file.java:10:TEST"

    def test_input_not_modified(self):
        """Test that the input list is left untouched."""
        findings = [make_finding(line_number=2, precedence_score=1), make_finding(line_number=1, precedence_score=9)]
        snapshot = list(findings)

        self.merger.merge_and_rank(findings)

        assert findings == snapshot


class TestSeverity:
    """Unit tests for Severity ranking."""

    def test_rank_order(self):
        """Test severity ranks."""
        ranks = [Severity.rank(s) for s in ("CRITICAL", "HIGH", "MEDIUM", "LOW", "INFO")]

        assert ranks == [4, 3, 2, 1, 0]

    def test_rank_accepts_enum_and_unknown(self):
        """Test ranking enum members and unknown values."""
        assert Severity.rank(Severity.HIGH) == 3
        assert Severity.rank("BLOCKER") == -1
