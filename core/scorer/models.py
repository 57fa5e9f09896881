#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results.
"""

from typing import Dict, Any, List
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DimensionScore:
    """Sub-score (0-100) for one dimension plus the inputs that produced it."""
    name: str
    score: float
    weight: float
    unknown: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def weighted(self) -> float:
        return self.weight * self.score


@dataclass(frozen=True)
class CompositeScore:
    """Weighted composite and its per-dimension breakdown."""
    composite: int
    dimensions: Dict[str, DimensionScore] = field(default_factory=dict)

    def sub_scores(self) -> Dict[str, float]:
        return {name: dim.score for name, dim in self.dimensions.items()}

    def score_of(self, name: str) -> float:
        return self.dimensions[name].score

    @property
    def unknown_dimensions(self) -> List[str]:
        return [name for name, dim in self.dimensions.items() if dim.unknown]

    def components(self) -> Dict[str, Any]:
        """JSON-friendly breakdown for persistence."""
        return {
            name: {
                'score': dim.score,
                'weight': dim.weight,
                'unknown': dim.unknown,
                'details': dim.details,
            }
            for name, dim in self.dimensions.items()
        }
