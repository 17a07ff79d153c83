"""Weighted questionnaire compatibility between two users.

The score only considers questions both users answered. Each answered pair
contributes its weight to the total, and to the matched weight when the two
answers are identical (exact, case-sensitive comparison).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Protocol


class Answerer(Protocol):
	id: int

	def answers(self) -> Mapping[str, Optional[str]]: ...


@dataclass(frozen=True, slots=True)
class MatchField:
	field: str
	label: str
	weight: float


# Order is the display order of matched_fields.
MATCH_FIELDS: tuple[MatchField, ...] = (
	MatchField("seeking_type", "Seeking", 2.0),
	MatchField("relationship_type", "Relationship Type", 2.0),
	MatchField("meeting_preference", "Meeting Preference", 1.5),
	MatchField("gaming_platform", "Gaming Platform", 1.0),
	MatchField("input_preference", "Input Preference", 0.5),
	MatchField("cat_or_dog", "Cat or Dog", 0.5),
	MatchField("drinking", "Drinking", 1.0),
	MatchField("smoking", "Smoking", 1.0),
	MatchField("coke_or_pepsi", "Coke or Pepsi", 0.25),
)


@dataclass(frozen=True, slots=True)
class FieldComparison:
	field: str
	label: str
	match: bool

	def to_dict(self) -> dict[str, object]:
		return {"field": self.field, "label": self.label, "match": self.match}


@dataclass(frozen=True, slots=True)
class CompatibilityResult:
	score: int
	matched_fields: List[FieldComparison] = field(default_factory=list)
	considered_count: int = 0
	any_fields_answered: bool = False


def round_half_up(value: float) -> int:
	"""Round non-negative values with .5 going up (Python's round() is banker's)."""
	return int(math.floor(value + 0.5))


def _answered(value: Optional[str]) -> bool:
	return value is not None and value != ""


def score_answers(viewer: Mapping[str, Optional[str]], target: Mapping[str, Optional[str]]) -> CompatibilityResult:
	total_weight = 0.0
	matched_weight = 0.0
	comparisons: List[FieldComparison] = []
	for match_field in MATCH_FIELDS:
		mine = viewer.get(match_field.field)
		theirs = target.get(match_field.field)
		if not (_answered(mine) and _answered(theirs)):
			continue
		is_match = mine == theirs
		total_weight += match_field.weight
		if is_match:
			matched_weight += match_field.weight
		comparisons.append(FieldComparison(match_field.field, match_field.label, is_match))
	if total_weight == 0:
		return CompatibilityResult(score=0, matched_fields=[], considered_count=0, any_fields_answered=False)
	return CompatibilityResult(
		score=round_half_up(matched_weight / total_weight * 100),
		matched_fields=comparisons,
		considered_count=len(comparisons),
		any_fields_answered=True,
	)


def compute_compatibility(viewer: Answerer, target: Answerer) -> CompatibilityResult:
	if viewer.id == target.id:
		return CompatibilityResult(score=100, matched_fields=[], considered_count=0, any_fields_answered=True)
	return score_answers(viewer.answers(), target.answers())
