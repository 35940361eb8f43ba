"""
Review Engines

Heuristic rules, the engine that runs them, and the merger that
combines findings of all engines.
"""

from .rules import Rule, RuleRegistry, SecretsDetectionRule, NullPointerDetectionRule, default_rules
from .heuristics import HeuristicsAnalysisEngine
from .merger import FindingMerger

__all__ = [
    'Rule',
    'RuleRegistry',
    'SecretsDetectionRule',
    'NullPointerDetectionRule',
    'default_rules',
    'HeuristicsAnalysisEngine',
    'FindingMerger',
]
