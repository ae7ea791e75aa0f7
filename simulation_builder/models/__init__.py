"""
Models package for the simulation builder.
"""
from .base import Base, engine, SessionLocal, get_db
from .models import (
    Subject,
    Topic,
    Tag,
    QuestionTag,
    Question,
    DifficultyLevel,
    QuestionStatus,
    QuestionType,
)

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "Subject",
    "Topic",
    "Tag",
    "QuestionTag",
    "Question",
    "DifficultyLevel",
    "QuestionStatus",
    "QuestionType",
]
