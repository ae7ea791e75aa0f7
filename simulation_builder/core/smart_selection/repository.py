"""
Question repository used by the smart selection engine.

The engine depends only on the ``QuestionRepository`` protocol: subject
summaries with eligible-question counts, and ordered, limited candidate
queries per (subject, difficulty). ``SQLAlchemyQuestionRepository`` is the
implementation over the ORM models; it only reads.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import (
    Any,
    Collection,
    List,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from simulation_builder.core.db_error_handling import handle_db_error
from simulation_builder.models.models import (
    DifficultyLevel,
    Question,
    QuestionStatus,
    QuestionTag,
    Subject,
)

logger = logging.getLogger(__name__)


class OrderKey(str, Enum):
    """Sort keys a candidate query can be ordered by."""

    USAGE_ASC = "usage_asc"
    CREATED_DESC = "created_desc"
    TOPIC_ASC = "topic_asc"
    ID_ASC = "id_asc"


@dataclass(frozen=True)
class SubjectSummary:
    """Active subject with the number of questions eligible for selection."""

    id: int
    available_published_count: int
    name: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class Candidate:
    """Candidate question as returned by a repository query.

    The display fields are carried through to the output untouched.
    """

    id: int
    subject_id: int
    difficulty: DifficultyLevel
    topic_id: Optional[int] = None
    usage_count: int = 0
    created_at: Optional[datetime] = None
    text: str = ""
    question_type: str = ""
    subject_name: Optional[str] = None
    subject_color: Optional[str] = None
    topic_name: Optional[str] = None
    explanation: Optional[str] = None


@runtime_checkable
class QuestionRepository(Protocol):
    """Read-only data source for the selection engine."""

    def get_subject_summaries(
        self,
        tag_filter_ids: Optional[Collection[int]] = None,
        exclude_question_ids: Optional[Collection[int]] = None,
    ) -> List[SubjectSummary]:
        ...

    def find_candidates(
        self,
        subject_id: int,
        difficulty: DifficultyLevel,
        exclude_ids: Collection[int],
        tag_filter_ids: Optional[Collection[int]],
        ordering: Sequence[OrderKey],
        limit: int,
    ) -> List[Candidate]:
        ...


def _eligibility_filters(
    exclude_ids: Optional[Collection[int]],
    tag_filter_ids: Optional[Collection[int]],
) -> List[Any]:
    """Published, not excluded, and carrying at least one requested tag."""
    filters: List[Any] = [Question.status == QuestionStatus.PUBLISHED]
    if exclude_ids:
        filters.append(~Question.id.in_(sorted(exclude_ids)))
    if tag_filter_ids:
        tagged = select(QuestionTag.question_id).where(
            QuestionTag.tag_id.in_(sorted(tag_filter_ids))
        )
        filters.append(Question.id.in_(tagged))
    return filters


_ORDER_COLUMNS = {
    OrderKey.USAGE_ASC: lambda: Question.times_used.asc(),
    OrderKey.CREATED_DESC: lambda: Question.created_at.desc(),
    OrderKey.TOPIC_ASC: lambda: Question.topic_id.asc().nullslast(),
    OrderKey.ID_ASC: lambda: Question.id.asc(),
}


def _question_to_candidate(question: Question) -> Candidate:
    subject = question.subject
    topic = question.topic
    return Candidate(
        id=question.id,
        subject_id=question.subject_id,
        difficulty=question.difficulty,
        topic_id=question.topic_id,
        usage_count=question.times_used or 0,
        created_at=question.created_at,
        text=question.text,
        question_type=question.question_type.value,
        subject_name=subject.name if subject is not None else None,
        subject_color=subject.color if subject is not None else None,
        topic_name=topic.name if topic is not None else None,
        explanation=question.explanation,
    )


class SQLAlchemyQuestionRepository:
    """QuestionRepository backed by a SQLAlchemy session owned by the caller."""

    def __init__(self, db: Session):
        self.db = db

    def get_subject_summaries(
        self,
        tag_filter_ids: Optional[Collection[int]] = None,
        exclude_question_ids: Optional[Collection[int]] = None,
    ) -> List[SubjectSummary]:
        """
        List active subjects with their eligible question counts.

        Subjects without eligible questions are included with a count of 0.
        Results are ordered by subject ID so planner output is stable.
        """
        counts = (
            select(
                Question.subject_id.label("subject_id"),
                func.count(Question.id).label("available"),
            )
            .where(*_eligibility_filters(exclude_question_ids, tag_filter_ids))
            .group_by(Question.subject_id)
            .subquery()
        )
        stmt = (
            select(
                Subject.id,
                Subject.name,
                Subject.color,
                func.coalesce(counts.c.available, 0),
            )
            .outerjoin(counts, counts.c.subject_id == Subject.id)
            .where(Subject.is_active.is_(True))
            .order_by(Subject.id.asc())
        )

        with handle_db_error("count eligible questions per subject"):
            rows = self.db.execute(stmt).all()

        return [
            SubjectSummary(
                id=subject_id,
                available_published_count=int(available),
                name=name,
                color=color,
            )
            for subject_id, name, color, available in rows
        ]

    def find_candidates(
        self,
        subject_id: int,
        difficulty: DifficultyLevel,
        exclude_ids: Collection[int],
        tag_filter_ids: Optional[Collection[int]],
        ordering: Sequence[OrderKey],
        limit: int,
    ) -> List[Candidate]:
        """
        Fetch up to ``limit`` eligible candidates for one bucket.

        Args:
            subject_id: Subject to draw from
            difficulty: Difficulty bucket
            exclude_ids: IDs that must not be returned
            tag_filter_ids: Optional tag filter (any-of)
            ordering: Sort keys, applied in sequence
            limit: Maximum number of rows

        Returns:
            Candidates in query order.
        """
        if limit <= 0:
            return []

        stmt = (
            select(Question)
            .options(joinedload(Question.subject), joinedload(Question.topic))
            .where(
                Question.subject_id == subject_id,
                Question.difficulty == difficulty,
                *_eligibility_filters(exclude_ids, tag_filter_ids),
            )
            .order_by(*[_ORDER_COLUMNS[key]() for key in ordering])
            .limit(limit)
        )

        with handle_db_error("fetch candidate questions"):
            questions = self.db.execute(stmt).scalars().all()

        logger.debug(
            f"Fetched {len(questions)}/{limit} candidates for subject {subject_id} "
            f"({difficulty.value})"
        )
        return [_question_to_candidate(q) for q in questions]
