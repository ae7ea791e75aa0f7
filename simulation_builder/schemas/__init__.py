"""
Pydantic schemas for the simulation builder.
"""
from .selection import (
    AllocationPreset,
    DifficultyMixPreset,
    DifficultyRatios,
    DistributionStats,
    QuestionProjection,
    QuestionSubject,
    QuestionTopic,
    SelectedQuestion,
    SelectionPlan,
    SelectionRequest,
    SelectionResult,
    SubjectPlan,
    SubjectStats,
)

__all__ = [
    "AllocationPreset",
    "DifficultyMixPreset",
    "DifficultyRatios",
    "DistributionStats",
    "QuestionProjection",
    "QuestionSubject",
    "QuestionTopic",
    "SelectedQuestion",
    "SelectionPlan",
    "SelectionRequest",
    "SelectionResult",
    "SubjectPlan",
    "SubjectStats",
]
