"""
Pytest configuration and shared fixtures for testing.
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Collection, Dict, List, Optional, Sequence, Set

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from simulation_builder.core.smart_selection.repository import (
    Candidate,
    OrderKey,
    SubjectSummary,
)
from simulation_builder.models import (
    Base,
    DifficultyLevel,
    Question,
    QuestionStatus,
    QuestionTag,
    Subject,
    Tag,
    Topic,
)


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that require live external services",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# Use SQLite for tests. The path is relative to this file so the .db
# lands inside tests/ regardless of the working directory.
_TEST_DB = Path(__file__).parent / "test.db"
SQLALCHEMY_DATABASE_URL = f"sqlite:///{_TEST_DB}"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_subject(db_session) -> Callable[..., Subject]:
    """
    Factory fixture creating subjects.
    """

    def _make(name: str, color: Optional[str] = None, is_active: bool = True) -> Subject:
        subject = Subject(name=name, color=color, is_active=is_active)
        db_session.add(subject)
        db_session.commit()
        db_session.refresh(subject)
        return subject

    return _make


@pytest.fixture
def make_topic(db_session) -> Callable[..., Topic]:
    """
    Factory fixture creating topics.
    """

    def _make(subject: Subject, name: str) -> Topic:
        topic = Topic(name=name, subject_id=subject.id)
        db_session.add(topic)
        db_session.commit()
        db_session.refresh(topic)
        return topic

    return _make


@pytest.fixture
def make_tag(db_session) -> Callable[..., Tag]:
    """
    Factory fixture creating tags.
    """

    def _make(name: str) -> Tag:
        tag = Tag(name=name)
        db_session.add(tag)
        db_session.commit()
        db_session.refresh(tag)
        return tag

    return _make


@pytest.fixture
def make_questions(db_session) -> Callable[..., List[Question]]:
    """
    Factory fixture creating ``count`` questions for a subject.

    Each question gets a distinct ``created_at`` (older first) so ordering
    by creation time is deterministic.
    """
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(
        subject: Subject,
        difficulty: DifficultyLevel,
        count: int,
        *,
        topic: Optional[Topic] = None,
        status: QuestionStatus = QuestionStatus.PUBLISHED,
        times_used: int = 0,
        tags: Sequence[Tag] = (),
        explanation: Optional[str] = None,
    ) -> List[Question]:
        questions = []
        for _ in range(count):
            counter["n"] += 1
            question = Question(
                text=f"{subject.name} {difficulty.value} question {counter['n']}",
                difficulty=difficulty,
                status=status,
                subject_id=subject.id,
                topic_id=topic.id if topic is not None else None,
                times_used=times_used,
                explanation=explanation,
                created_at=base_time + timedelta(minutes=counter["n"]),
            )
            db_session.add(question)
            questions.append(question)
        db_session.commit()

        for question in questions:
            db_session.refresh(question)
            for tag in tags:
                db_session.add(QuestionTag(question_id=question.id, tag_id=tag.id))
        db_session.commit()
        return questions

    return _make


class FakeQuestionRepository:
    """In-memory QuestionRepository that records every candidate query."""

    def __init__(
        self,
        candidates: Sequence[Candidate],
        subjects: Optional[Sequence[SubjectSummary]] = None,
        tags: Optional[Dict[int, Set[int]]] = None,
    ):
        self.candidates = list(candidates)
        self.tags = tags or {}
        self._subjects = subjects
        self.calls: List[dict] = []

    def _eligible(
        self,
        exclude_ids: Optional[Collection[int]],
        tag_filter_ids: Optional[Collection[int]],
    ) -> List[Candidate]:
        excluded = set(exclude_ids or ())
        wanted_tags = set(tag_filter_ids or ())
        return [
            c
            for c in self.candidates
            if c.id not in excluded
            and (not wanted_tags or self.tags.get(c.id, set()) & wanted_tags)
        ]

    def get_subject_summaries(self, tag_filter_ids=None, exclude_question_ids=None):
        eligible = self._eligible(exclude_question_ids, tag_filter_ids)
        if self._subjects is not None:
            return [
                SubjectSummary(
                    id=s.id,
                    name=s.name,
                    color=s.color,
                    available_published_count=sum(
                        1 for c in eligible if c.subject_id == s.id
                    ),
                )
                for s in self._subjects
            ]
        subject_ids = sorted({c.subject_id for c in self.candidates})
        return [
            SubjectSummary(
                id=subject_id,
                name=f"Subject {subject_id}",
                available_published_count=sum(
                    1 for c in eligible if c.subject_id == subject_id
                ),
            )
            for subject_id in subject_ids
        ]

    def find_candidates(
        self, subject_id, difficulty, exclude_ids, tag_filter_ids, ordering, limit
    ):
        self.calls.append(
            {
                "subject_id": subject_id,
                "difficulty": difficulty,
                "exclude_ids": set(exclude_ids),
                "tag_filter_ids": tag_filter_ids,
                "ordering": list(ordering),
                "limit": limit,
            }
        )
        rows = [
            c
            for c in self._eligible(exclude_ids, tag_filter_ids)
            if c.subject_id == subject_id and c.difficulty == difficulty
        ]
        # Apply sort keys last-to-first so the first key wins (stable sort)
        for key in reversed(list(ordering)):
            if key == OrderKey.USAGE_ASC:
                rows.sort(key=lambda c: c.usage_count)
            elif key == OrderKey.CREATED_DESC:
                rows.sort(key=lambda c: c.created_at, reverse=True)
            elif key == OrderKey.TOPIC_ASC:
                rows.sort(key=lambda c: (c.topic_id is None, c.topic_id or 0))
            elif key == OrderKey.ID_ASC:
                rows.sort(key=lambda c: c.id)
        return rows[:limit]


def build_candidates(
    subject_id: int,
    difficulty: DifficultyLevel,
    count: int,
    *,
    start_id: int,
    topic_ids: Optional[Sequence[Optional[int]]] = None,
    usage_counts: Optional[Sequence[int]] = None,
) -> List[Candidate]:
    """Build ``count`` candidates with sequential IDs starting at ``start_id``."""
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    candidates = []
    for idx in range(count):
        question_id = start_id + idx
        candidates.append(
            Candidate(
                id=question_id,
                subject_id=subject_id,
                difficulty=difficulty,
                topic_id=topic_ids[idx] if topic_ids is not None else None,
                usage_count=usage_counts[idx] if usage_counts is not None else 0,
                created_at=base_time + timedelta(minutes=question_id),
                text=f"Question {question_id}",
                question_type="SINGLE_CHOICE",
                subject_name=f"Subject {subject_id}",
                topic_name=(
                    f"Topic {topic_ids[idx]}"
                    if topic_ids is not None and topic_ids[idx] is not None
                    else None
                ),
            )
        )
    return candidates


@pytest.fixture
def candidate_factory() -> Callable[..., List[Candidate]]:
    """Expose ``build_candidates`` to tests."""
    return build_candidates


@pytest.fixture
def fake_repository_factory() -> Callable[..., FakeQuestionRepository]:
    """Factory for in-memory repositories."""
    return FakeQuestionRepository
