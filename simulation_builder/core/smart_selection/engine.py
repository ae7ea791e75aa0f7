"""
Smart random question selection.

Builds a balanced question set for a practice simulation from a target size,
a subject allocation preset, a difficulty mix and freshness/variety
preferences.

Algorithm:
1. Resolve the difficulty mix into Easy/Medium/Hard ratios
2. Plan the subject allocation and top it up to the requested total
3. For each planned subject, split its count by difficulty and select each
   (subject, difficulty) bucket in turn
4. Fill any per-subject shortfall from the remaining pool of that subject
5. Shuffle the combined set, assign a 0-based order and report the achieved
   distribution

The engine keeps no state between calls. Run state lives in a
``SelectionContext`` created per call, and the only side effects are
repository reads.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from simulation_builder.core.config import Settings, settings as default_settings
from simulation_builder.core.logging_config import request_id_scope
from simulation_builder.core.question_utils import candidate_to_selected_question
from simulation_builder.core.smart_selection.candidates import select_bucket
from simulation_builder.core.smart_selection.context import SelectionContext
from simulation_builder.core.smart_selection.difficulty import (
    DIFFICULTY_LEVELS,
    calculate_difficulty_targets,
    resolve_difficulty_ratios,
)
from simulation_builder.core.smart_selection.distribution import (
    calculate_target_distribution,
    normalize_distribution_total,
)
from simulation_builder.core.smart_selection.gap_fill import fill_subject_gap
from simulation_builder.core.smart_selection.reporting import (
    build_shortfall_warning,
    calculate_distribution_stats,
)
from simulation_builder.core.smart_selection.repository import (
    Candidate,
    QuestionRepository,
    SQLAlchemyQuestionRepository,
    SubjectSummary,
)
from simulation_builder.core.smart_selection.shuffle import secure_shuffle
from simulation_builder.schemas.selection import (
    DifficultyRatios,
    SelectionPlan,
    SelectionRequest,
    SelectionResult,
    SubjectPlan,
)

logger = logging.getLogger(__name__)


class SmartSelectionEngine:
    """
    Generates simulation question sets from a question repository.

    Args:
        repository: Read-only question source.
        config: Settings to read presets and the over-fetch factor from
            (defaults to the application settings).
    """

    def __init__(
        self,
        repository: QuestionRepository,
        config: Optional[Settings] = None,
    ):
        self.repository = repository
        self.config = config or default_settings

    def _resolve_ratios(self, request: SelectionRequest) -> DifficultyRatios:
        return resolve_difficulty_ratios(
            request.difficulty_mix, self.config.SELECTION_DIFFICULTY_PRESETS
        )

    def _load_subjects(self, request: SelectionRequest) -> List[SubjectSummary]:
        return self.repository.get_subject_summaries(
            tag_filter_ids=request.tag_filter_ids,
            exclude_question_ids=request.exclude_question_ids,
        )

    def _plan_distribution(
        self, request: SelectionRequest, subjects: List[SubjectSummary]
    ) -> Dict[int, int]:
        distribution = calculate_target_distribution(
            request.allocation_preset,
            subjects,
            request.total_questions,
            focus_subject_id=request.focus_subject_id,
            custom_distribution=request.custom_distribution,
        )
        return normalize_distribution_total(distribution, request.total_questions)

    def plan(self, request: SelectionRequest) -> SelectionPlan:
        """
        Preview the subject and difficulty split without drawing questions.

        Runs the ratio resolver, the planner and the difficulty targeter
        only; no candidate queries are issued.
        """
        ratios = self._resolve_ratios(request)
        subjects = self._load_subjects(request)
        subjects_by_id = {s.id: s for s in subjects}
        distribution = self._plan_distribution(request, subjects)

        subject_plans = []
        for subject_id, planned in distribution.items():
            summary = subjects_by_id.get(subject_id)
            targets = calculate_difficulty_targets(planned, ratios)
            subject_plans.append(
                SubjectPlan(
                    subject_id=subject_id,
                    name=summary.name if summary is not None else None,
                    available=(
                        summary.available_published_count if summary is not None else 0
                    ),
                    planned=planned,
                    difficulty_targets={
                        level.value: count for level, count in targets.items()
                    },
                )
            )

        return SelectionPlan(
            subjects=subject_plans,
            difficulty_ratios=ratios,
            requested_total=request.total_questions,
            planned_total=sum(distribution.values()),
        )

    def _select_for_subject(
        self, context: SelectionContext, subject_id: int, target_count: int
    ) -> List[Candidate]:
        targets = calculate_difficulty_targets(target_count, context.difficulty_ratios)
        picked: List[Candidate] = []

        for difficulty in DIFFICULTY_LEVELS:
            count = targets[difficulty]
            if count > 0:
                picked.extend(select_bucket(context, subject_id, difficulty, count))

        remaining_needed = target_count - len(picked)
        if remaining_needed > 0:
            picked.extend(fill_subject_gap(context, subject_id, remaining_needed))

        return picked

    def select(self, request: SelectionRequest) -> SelectionResult:
        """
        Generate a question set for a request.

        Never raises for scarcity: empty pools, exhausted buckets and
        unknown subjects all lead to a smaller set with ``warning`` set.
        Repository failures propagate to the caller.

        Args:
            request: Selection request.

        Returns:
            SelectionResult with questions in final order and achieved stats.
        """
        ratios = self._resolve_ratios(request)
        subjects = self._load_subjects(request)
        subjects_by_id = {s.id: s for s in subjects}
        distribution = self._plan_distribution(request, subjects)

        logger.info(
            f"Smart selection plan ({request.allocation_preset.value}): "
            f"{dict(distribution)} for {request.total_questions} questions",
            extra={
                "allocation_preset": request.allocation_preset.value,
                "requested": request.total_questions,
            },
        )

        context = SelectionContext.from_request(
            request,
            self.repository,
            ratios,
            overfetch_factor=self.config.SELECTION_OVERFETCH_FACTOR,
        )

        collected: List[Candidate] = []
        for subject_id, target_count in distribution.items():
            if target_count <= 0:
                continue
            if subject_id not in subjects_by_id:
                logger.warning(
                    f"Skipping subject {subject_id}: not an active subject "
                    f"({target_count} planned question(s) will be missing)",
                    extra={"subject_id": subject_id, "requested": target_count},
                )
                continue
            collected.extend(self._select_for_subject(context, subject_id, target_count))

        final = secure_shuffle(collected)
        questions = [
            candidate_to_selected_question(candidate, order)
            for order, candidate in enumerate(final)
        ]

        achieved_total = len(questions)
        warning = build_shortfall_warning(request.total_questions, achieved_total)
        if warning:
            logger.warning(
                warning,
                extra={
                    "requested": request.total_questions,
                    "achieved": achieved_total,
                },
            )
        else:
            logger.info(f"Smart selection complete: {achieved_total} questions")

        return SelectionResult(
            questions=questions,
            stats=calculate_distribution_stats(questions),
            requested_total=request.total_questions,
            achieved_total=achieved_total,
            warning=warning,
        )


def select_smart_random_questions(
    db: Session, request: SelectionRequest, request_id: Optional[str] = None
) -> SelectionResult:
    """
    Generate a question set using the SQLAlchemy repository.

    Args:
        db: Database session (only read from)
        request: Selection request
        request_id: Correlation ID attached to every log entry of the run

    Returns:
        SelectionResult for the request
    """
    engine = SmartSelectionEngine(SQLAlchemyQuestionRepository(db))
    with request_id_scope(request_id):
        return engine.select(request)
