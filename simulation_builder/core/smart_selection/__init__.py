"""
Smart random question selection for practice simulations.
"""

from .candidates import apply_topic_coverage, select_bucket
from .context import SelectionContext
from .difficulty import (
    DIFFICULTY_LEVELS,
    EQUAL_THIRDS,
    calculate_difficulty_targets,
    resolve_difficulty_ratios,
)
from .distribution import (
    calculate_balanced_distribution,
    calculate_proportional_distribution,
    calculate_target_distribution,
    normalize_distribution_total,
)
from .engine import SmartSelectionEngine, select_smart_random_questions
from .gap_fill import fill_subject_gap
from .reporting import build_shortfall_warning, calculate_distribution_stats
from .repository import (
    Candidate,
    OrderKey,
    QuestionRepository,
    SQLAlchemyQuestionRepository,
    SubjectSummary,
)
from .shuffle import secure_shuffle

__all__ = [
    "DIFFICULTY_LEVELS",
    "EQUAL_THIRDS",
    "Candidate",
    "OrderKey",
    "QuestionRepository",
    "SQLAlchemyQuestionRepository",
    "SelectionContext",
    "SmartSelectionEngine",
    "SubjectSummary",
    "apply_topic_coverage",
    "build_shortfall_warning",
    "calculate_balanced_distribution",
    "calculate_difficulty_targets",
    "calculate_distribution_stats",
    "calculate_proportional_distribution",
    "calculate_target_distribution",
    "fill_subject_gap",
    "normalize_distribution_total",
    "resolve_difficulty_ratios",
    "secure_shuffle",
    "select_bucket",
    "select_smart_random_questions",
]
