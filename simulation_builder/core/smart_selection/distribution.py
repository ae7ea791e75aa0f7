"""
Subject allocation for smart random selection.

Turns a requested total and an allocation preset into an ordered
``{subject_id: count}`` map. Dict insertion order is the stable order used
for residuals and normalization, so callers must pass subjects in a
deterministic order (the repository returns them by ascending ID).
"""

import logging
from typing import Dict, Mapping, Optional, Sequence

from simulation_builder.core.smart_selection.difficulty import round_half_up
from simulation_builder.core.smart_selection.repository import SubjectSummary
from simulation_builder.schemas.selection import AllocationPreset

logger = logging.getLogger(__name__)


def _active_subjects(subjects: Sequence[SubjectSummary]) -> list[SubjectSummary]:
    return [s for s in subjects if s.available_published_count > 0]


def calculate_proportional_distribution(
    subjects: Sequence[SubjectSummary], total_questions: int
) -> Dict[int, int]:
    """
    Allocate proportionally to each subject's available question count.

    Every active subject but the last gets ``round(total * share)``; the
    last one takes whatever is left so rounding never changes the total.
    A share never exceeds what is still undistributed, so no subject ends
    up with a negative count when many small shares round up.
    """
    distribution: Dict[int, int] = {}
    active = _active_subjects(subjects)
    total_available = sum(s.available_published_count for s in active)

    if total_available == 0:
        return distribution

    distributed = 0
    for idx, subject in enumerate(active):
        if idx == len(active) - 1:
            count = total_questions - distributed
        else:
            count = min(
                round_half_up(
                    subject.available_published_count
                    / total_available
                    * total_questions
                ),
                total_questions - distributed,
            )
        distribution[subject.id] = count
        distributed += count

    return distribution


def calculate_balanced_distribution(
    subjects: Sequence[SubjectSummary], total_questions: int
) -> Dict[int, int]:
    """Split evenly across active subjects; the first ones absorb the remainder."""
    distribution: Dict[int, int] = {}
    active = _active_subjects(subjects)

    if not active:
        return distribution

    per_subject = total_questions // len(active)
    remainder = total_questions % len(active)
    for idx, subject in enumerate(active):
        distribution[subject.id] = per_subject + (1 if idx < remainder else 0)

    return distribution


def calculate_target_distribution(
    preset: AllocationPreset,
    subjects: Sequence[SubjectSummary],
    total_questions: int,
    focus_subject_id: Optional[int] = None,
    custom_distribution: Optional[Mapping[int, int]] = None,
) -> Dict[int, int]:
    """
    Compute the subject allocation for a preset.

    Fallbacks:
        - SINGLE_SUBJECT without a focus subject behaves like PROPORTIONAL.
        - CUSTOM without a map behaves like PROPORTIONAL.

    CUSTOM maps are taken verbatim minus non-positive entries; they are not
    scaled to ``total_questions``.

    Args:
        preset: Allocation policy
        subjects: Subject summaries in stable order
        total_questions: Requested total
        focus_subject_id: Subject for SINGLE_SUBJECT
        custom_distribution: Subject ID -> count for CUSTOM

    Returns:
        Ordered subject ID -> count map (not yet normalized).
    """
    if preset == AllocationPreset.BALANCED:
        return calculate_balanced_distribution(subjects, total_questions)

    if preset == AllocationPreset.SINGLE_SUBJECT:
        if focus_subject_id is not None:
            return {focus_subject_id: total_questions}
        logger.warning(
            "SINGLE_SUBJECT allocation without focus_subject_id; "
            "falling back to PROPORTIONAL"
        )
        return calculate_proportional_distribution(subjects, total_questions)

    if preset == AllocationPreset.CUSTOM:
        if custom_distribution is not None:
            return {
                subject_id: count
                for subject_id, count in custom_distribution.items()
                if count > 0
            }
        logger.warning(
            "CUSTOM allocation without custom_distribution; "
            "falling back to PROPORTIONAL"
        )
        return calculate_proportional_distribution(subjects, total_questions)

    return calculate_proportional_distribution(subjects, total_questions)


def normalize_distribution_total(
    distribution: Dict[int, int], target_total: int
) -> Dict[int, int]:
    """
    Top up the first entry so the plan sums to ``target_total``.

    Only a shortfall is corrected; a plan that exceeds the target (possible
    with CUSTOM) is left as is. Mutates and returns ``distribution``.
    """
    current_total = sum(distribution.values())
    if current_total < target_total and distribution:
        first_key = next(iter(distribution))
        distribution[first_key] += target_total - current_total
    return distribution
