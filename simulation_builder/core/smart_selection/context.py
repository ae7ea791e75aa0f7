"""
Per-run state for smart random selection.

A ``SelectionContext`` is created for each ``select()`` call and threaded
through every bucket and gap-fill step. It holds the resolved preferences
and the growing set of already selected question IDs, so a later bucket
always sees what earlier buckets picked.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Set

from simulation_builder.core.smart_selection.repository import (
    Candidate,
    OrderKey,
    QuestionRepository,
)
from simulation_builder.schemas.selection import DifficultyRatios, SelectionRequest


@dataclass
class SelectionContext:
    """Preferences and exclusion accumulator for one selection run."""

    repository: QuestionRepository
    difficulty_ratios: DifficultyRatios
    avoid_recently_used: bool = True
    prefer_recent_questions: bool = False
    maximize_topic_coverage: bool = True
    tag_filter_ids: FrozenSet[int] = frozenset()
    request_excluded_ids: FrozenSet[int] = frozenset()
    overfetch_factor: int = 3
    selected_ids: Set[int] = field(default_factory=set)

    @classmethod
    def from_request(
        cls,
        request: SelectionRequest,
        repository: QuestionRepository,
        difficulty_ratios: DifficultyRatios,
        overfetch_factor: int = 3,
    ) -> "SelectionContext":
        return cls(
            repository=repository,
            difficulty_ratios=difficulty_ratios,
            avoid_recently_used=request.avoid_recently_used,
            prefer_recent_questions=request.prefer_recent_questions,
            maximize_topic_coverage=request.maximize_topic_coverage,
            tag_filter_ids=frozenset(request.tag_filter_ids or ()),
            request_excluded_ids=frozenset(request.exclude_question_ids or ()),
            overfetch_factor=overfetch_factor,
        )

    def excluded_ids(self) -> Set[int]:
        """IDs no query may return: request exclusions plus this run's picks."""
        return set(self.request_excluded_ids) | self.selected_ids

    def record(self, candidates: Iterable[Candidate]) -> None:
        """Mark candidates as selected for the rest of the run."""
        for candidate in candidates:
            self.selected_ids.add(candidate.id)

    def bucket_ordering(self) -> List[OrderKey]:
        """
        Sort keys for a bucket query, in precedence order.

        Usage ascending, then newest first, then topic grouping, each only
        when its preference is on; ascending ID always closes the key.
        """
        ordering: List[OrderKey] = []
        if self.avoid_recently_used:
            ordering.append(OrderKey.USAGE_ASC)
        if self.prefer_recent_questions:
            ordering.append(OrderKey.CREATED_DESC)
        if self.maximize_topic_coverage:
            ordering.append(OrderKey.TOPIC_ASC)
        ordering.append(OrderKey.ID_ASC)
        return ordering

    def gap_fill_ordering(self) -> List[OrderKey]:
        """Sort keys for gap filling: least used if requested, else newest."""
        primary = (
            OrderKey.USAGE_ASC if self.avoid_recently_used else OrderKey.CREATED_DESC
        )
        return [primary, OrderKey.ID_ASC]
