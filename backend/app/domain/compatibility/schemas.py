"""Response schemas for compatibility scores."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel

from app.domain.compatibility.engine import CompatibilityResult


class FieldMatchOut(BaseModel):
	field: str
	label: str
	match: bool


class CompatibilityOut(BaseModel):
	score: int
	matched_fields: List[FieldMatchOut]
	considered_count: int
	any_fields_answered: bool

	@classmethod
	def from_result(cls, result: CompatibilityResult) -> "CompatibilityOut":
		return cls(
			score=result.score,
			matched_fields=[FieldMatchOut(**item.to_dict()) for item in result.matched_fields],
			considered_count=result.considered_count,
			any_fields_answered=result.any_fields_answered,
		)
