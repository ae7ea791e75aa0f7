"""
Database models read by the smart selection engine.

Only the columns the engine queries or passes through are mapped here; the
surrounding application owns the full schema and its migrations.
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Enum,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from .base import Base


class DifficultyLevel(str, enum.Enum):
    """Difficulty level enumeration."""

    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class QuestionStatus(str, enum.Enum):
    """Publication status of a question."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class QuestionType(str, enum.Enum):
    """Answer format of a question."""

    SINGLE_CHOICE = "SINGLE_CHOICE"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    OPEN_ANSWER = "OPEN_ANSWER"


class Subject(Base):
    """Exam subject (e.g. Biology, Chemistry)."""

    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    color = Column(String(20))  # Hex color used by the UI, optional
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    topics = relationship("Topic", back_populates="subject")
    questions = relationship("Question", back_populates="subject")


class Topic(Base):
    """Topic within a subject."""

    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    subject_id = Column(
        Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
    )

    subject = relationship("Subject", back_populates="topics")
    questions = relationship("Question", back_populates="topic")


class Tag(Base):
    """Free-form label attached to questions."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)


class QuestionTag(Base):
    """Junction table between questions and tags."""

    __tablename__ = "question_tags"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False)

    question = relationship("Question", back_populates="question_tags")
    tag = relationship("Tag")

    __table_args__ = (
        UniqueConstraint("question_id", "tag_id", name="uq_question_tag"),
        Index("ix_question_tags_tag_id", "tag_id"),
    )


class Question(Base):
    """Question bank entry."""

    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    question_type = Column(
        Enum(QuestionType), default=QuestionType.SINGLE_CHOICE, nullable=False
    )
    difficulty = Column(Enum(DifficultyLevel), nullable=False)
    status = Column(
        Enum(QuestionStatus), default=QuestionStatus.DRAFT, nullable=False
    )
    subject_id = Column(
        Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
    )
    topic_id = Column(
        Integer, ForeignKey("topics.id", ondelete="SET NULL"), nullable=True
    )
    explanation = Column(Text)  # Optional explanation shown after the answer
    times_used = Column(
        Integer, default=0, nullable=False
    )  # Number of simulations that included this question
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    subject = relationship("Subject", back_populates="questions")
    topic = relationship("Topic", back_populates="questions")
    question_tags = relationship(
        "QuestionTag", back_populates="question", cascade="all, delete-orphan"
    )

    __table_args__ = (
        # Candidate queries always filter on these three columns
        Index("ix_questions_subject_difficulty_status", "subject_id", "difficulty", "status"),
    )
