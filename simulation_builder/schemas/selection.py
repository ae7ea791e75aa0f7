"""
Pydantic schemas for smart random question selection.
"""
from enum import Enum
from typing import Dict, List, Optional, Set, Union

from pydantic import BaseModel, Field, field_validator

from simulation_builder.models.models import DifficultyLevel


class AllocationPreset(str, Enum):
    """How the requested total is spread across subjects."""

    PROPORTIONAL = "PROPORTIONAL"  # Proportional to available questions per subject
    BALANCED = "BALANCED"  # Equal share per subject
    SINGLE_SUBJECT = "SINGLE_SUBJECT"  # Everything from the focus subject
    CUSTOM = "CUSTOM"  # Caller-supplied subject -> count map


class DifficultyMixPreset(str, Enum):
    """Named difficulty mixes shipped with the default settings."""

    BALANCED = "BALANCED"  # 30% easy, 50% medium, 20% hard
    EASY_FOCUS = "EASY_FOCUS"  # 50% easy, 40% medium, 10% hard
    HARD_FOCUS = "HARD_FOCUS"  # 10% easy, 40% medium, 50% hard
    MEDIUM_ONLY = "MEDIUM_ONLY"  # 100% medium
    MIXED = "MIXED"  # 33/34/33


class DifficultyRatios(BaseModel):
    """Explicit Easy/Medium/Hard proportions.

    The caller is responsible for supplying proportions that sum to 1; they
    are used exactly as given.
    """

    easy: float = Field(..., ge=0.0, description="Proportion of easy questions")
    medium: float = Field(..., ge=0.0, description="Proportion of medium questions")
    hard: float = Field(..., ge=0.0, description="Proportion of hard questions")

    class Config:
        """Pydantic configuration."""

        frozen = True

    def for_level(self, level: DifficultyLevel) -> float:
        """Return the ratio for a difficulty level."""
        return {
            DifficultyLevel.EASY: self.easy,
            DifficultyLevel.MEDIUM: self.medium,
            DifficultyLevel.HARD: self.hard,
        }[level]


class SelectionRequest(BaseModel):
    """Input for one smart random selection run."""

    total_questions: int = Field(..., ge=1, description="Desired final set size")
    allocation_preset: AllocationPreset = Field(
        AllocationPreset.BALANCED, description="Subject allocation policy"
    )
    focus_subject_id: Optional[int] = Field(
        None, description="Subject to draw from (SINGLE_SUBJECT only)"
    )
    custom_distribution: Optional[Dict[int, int]] = Field(
        None, description="Subject ID -> question count (CUSTOM only)"
    )
    difficulty_mix: Union[DifficultyRatios, str] = Field(
        DifficultyMixPreset.BALANCED.value,
        description="Preset name or explicit easy/medium/hard ratios",
    )
    avoid_recently_used: bool = Field(
        True, description="Prefer questions used in fewer simulations"
    )
    prefer_recent_questions: bool = Field(
        False, description="Prefer newly added questions"
    )
    maximize_topic_coverage: bool = Field(
        True, description="Spread each bucket across as many topics as possible"
    )
    tag_filter_ids: Optional[Set[int]] = Field(
        None, description="Candidates must carry at least one of these tags"
    )
    exclude_question_ids: Optional[Set[int]] = Field(
        None, description="Questions that must never be selected"
    )

    class Config:
        """Pydantic configuration."""

        frozen = True

    @field_validator("custom_distribution")
    @classmethod
    def validate_custom_distribution(
        cls, v: Optional[Dict[int, int]]
    ) -> Optional[Dict[int, int]]:
        """Reject negative per-subject counts."""
        if v is None:
            return v
        negative = [subject_id for subject_id, count in v.items() if count < 0]
        if negative:
            raise ValueError(
                f"custom_distribution counts must be non-negative, got negative for {negative}"
            )
        return v

    @field_validator("difficulty_mix", mode="before")
    @classmethod
    def normalize_preset_name(cls, v):
        """Accept enum members and strip whitespace around preset names."""
        if isinstance(v, DifficultyMixPreset):
            return v.value
        if isinstance(v, str):
            return v.strip()
        return v


class QuestionSubject(BaseModel):
    """Subject fields shown next to a selected question."""

    id: int
    name: Optional[str] = None
    color: Optional[str] = None


class QuestionTopic(BaseModel):
    """Topic fields shown next to a selected question."""

    id: int
    name: Optional[str] = None


class QuestionProjection(BaseModel):
    """Display projection of a selected question."""

    id: int = Field(..., description="Question ID")
    text: str = Field(..., description="The question text")
    question_type: str = Field(..., description="Answer format")
    difficulty: str = Field(..., description="Difficulty level (EASY, MEDIUM, HARD)")
    explanation: Optional[str] = Field(
        None, description="Explanation shown after the answer"
    )
    subject: Optional[QuestionSubject] = None
    topic: Optional[QuestionTopic] = None


class SelectedQuestion(BaseModel):
    """One entry of the generated question set."""

    question_id: int = Field(..., description="Question ID")
    order: int = Field(..., ge=0, description="0-based position in the simulation")
    question: QuestionProjection

    class Config:
        """Pydantic configuration."""

        frozen = True


class SubjectStats(BaseModel):
    """Per-subject count in the final set."""

    subject_id: Optional[int] = None
    name: Optional[str] = None
    color: Optional[str] = None
    count: int = 0


class DistributionStats(BaseModel):
    """Achieved distribution of a generated set."""

    total: int = Field(..., description="Number of selected questions")
    by_subject: Dict[str, SubjectStats] = Field(
        default_factory=dict, description="Counts keyed by subject ID"
    )
    by_difficulty: Dict[str, int] = Field(
        default_factory=dict, description="Counts keyed by difficulty level"
    )
    topics_covered: int = Field(0, description="Distinct topics in the set")


class SelectionResult(BaseModel):
    """Output of a smart random selection run."""

    questions: List[SelectedQuestion] = Field(
        ..., description="Selected questions in final order"
    )
    stats: DistributionStats
    requested_total: int = Field(..., description="Number of questions requested")
    achieved_total: int = Field(..., description="Number of questions selected")
    warning: Optional[str] = Field(
        None, description="Present when fewer questions than requested were found"
    )

    def to_simulation_questions(self) -> List[Dict[str, int]]:
        """Return the ``question_id``/``order`` pairs a simulation persists."""
        return [
            {"question_id": q.question_id, "order": q.order}
            for q in sorted(self.questions, key=lambda q: q.order)
        ]


class SubjectPlan(BaseModel):
    """Planned allocation for one subject (no questions drawn)."""

    subject_id: int
    name: Optional[str] = None
    available: int = Field(0, description="Eligible published questions")
    planned: int = Field(..., description="Questions allocated by the planner")
    difficulty_targets: Dict[str, int] = Field(default_factory=dict)


class SelectionPlan(BaseModel):
    """Preview of how a request would be split, before any candidate query."""

    subjects: List[SubjectPlan] = Field(default_factory=list)
    difficulty_ratios: DifficultyRatios
    requested_total: int
    planned_total: int
