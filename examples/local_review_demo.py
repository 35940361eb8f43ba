#!/usr/bin/env python3
"""
Local Review Demo

Reviews a unified diff file on the command line, without GitHub.
Runs the heuristic rules and, when an Ollama server is reachable,
the LLM reviewer, then prints the comment the bot would post.

Usage:
    python examples/local_review_demo.py <diff_file> [--no-llm]

Example:
    git diff main > change.diff
    python examples/local_review_demo.py change.diff

Requirements:
    - Ollama running on localhost:11434 (optional, set LLM_BASE_URL to override)
"""

import sys
import os
import asyncio
import logging
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pr_review_bot.config import AppConfig
from pr_review_bot.diff import UnifiedDiffParser
from pr_review_bot.formatting import ReviewCommentFormatter
from pr_review_bot.llm import OllamaClient, LLMReviewEngine
from pr_review_bot.models import PullRequestContext
from pr_review_bot.review import FindingMerger, HeuristicsAnalysisEngine, RuleRegistry


def setup_logging():
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def print_header(diff_file: str):
    """Print demo header."""
    print("🚀 PR Review Bot - Local Review Demo")
    print("=" * 50)
    print(f"📄 Diff file: {diff_file}")
    print()


async def review_diff(diff_text: str, use_llm: bool) -> str:
    """Run the review pipeline on a diff and return the comment body."""
    config = AppConfig.from_env()
    context = PullRequestContext(owner="local", repo=Path.cwd().name or "repo", pr_number=1, title="Local changes")

    chunks = UnifiedDiffParser().parse(diff_text)
    print(f"🔍 Parsed {len(chunks)} change chunks from {len({c.file_path for c in chunks})} files")

    findings = HeuristicsAnalysisEngine(RuleRegistry()).analyze(chunks)
    print(f"   Heuristics: {len(findings)} findings")

    if use_llm:
        client = OllamaClient(config.llm)
        if client.is_available():
            llm_findings = await LLMReviewEngine(client).analyze_with_llm(context, chunks)
            print(f"   LLM ({config.llm.model}): {len(llm_findings)} findings")
            findings.extend(llm_findings)
        else:
            print(f"⚠️  Ollama not reachable at {config.llm.base_url}, skipping LLM review")

    ranked = FindingMerger().merge_and_rank(findings)
    return ReviewCommentFormatter().format_review(ranked, context)


async def main():
    """Main demo function."""
    args = [arg for arg in sys.argv[1:] if not arg.startswith('--')]
    if len(args) != 1:
        print(__doc__)
        return 1

    diff_file = args[0]
    if not Path(diff_file).is_file():
        print(f"❌ Error: diff file not found: {diff_file}")
        return 1

    setup_logging()
    print_header(diff_file)

    diff_text = Path(diff_file).read_text(encoding='utf-8', errors='replace')
    body = await review_diff(diff_text, use_llm='--no-llm' not in sys.argv)

    print()
    print("📝 Review comment:")
    print("-" * 50)
    print(body)
    return 0


if __name__ == '__main__':
    sys.exit(asyncio.run(main()))
