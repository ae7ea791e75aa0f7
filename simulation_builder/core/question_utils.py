"""
Utility functions for turning selection candidates into output schemas.
"""

from typing import TYPE_CHECKING

from simulation_builder.schemas.selection import (
    QuestionProjection,
    QuestionSubject,
    QuestionTopic,
    SelectedQuestion,
)

if TYPE_CHECKING:
    from simulation_builder.core.smart_selection.repository import Candidate


def candidate_to_selected_question(
    candidate: "Candidate", order: int
) -> SelectedQuestion:
    """
    Convert a Candidate into a SelectedQuestion at the given position.

    The subject sub-object is always present and keyed on ``subject_id``;
    the topic sub-object is present whenever ``topic_id`` is set. Names,
    color and explanation are passed through as given, possibly ``None``.

    Args:
        candidate: Candidate returned by the repository
        order: 0-based position in the final set

    Returns:
        SelectedQuestion with the display projection of the candidate
    """
    topic = None
    if candidate.topic_id is not None:
        topic = QuestionTopic(id=candidate.topic_id, name=candidate.topic_name)

    return SelectedQuestion(
        question_id=candidate.id,
        order=order,
        question=QuestionProjection(
            id=candidate.id,
            text=candidate.text,
            question_type=candidate.question_type,
            difficulty=candidate.difficulty.value,
            explanation=candidate.explanation,
            subject=QuestionSubject(
                id=candidate.subject_id,
                name=candidate.subject_name,
                color=candidate.subject_color,
            ),
            topic=topic,
        ),
    )
