#!/usr/bin/env python3
"""
Scoring Module - multi-factor compatibility scoring.

Public API:
- ScoringEngine: composite score from two feature vectors
- CompositeScore / DimensionScore: scoring results

Modules:
- models.py: Data structures (CompositeScore, DimensionScore)
- dimensions.py: One pure scoring function per dimension
- service.py: ScoringEngine orchestrator and weight validation
"""

from core.scorer.models import CompositeScore, DimensionScore
from core.scorer.service import ScoringEngine, validate_weights

__all__ = ['ScoringEngine', 'CompositeScore', 'DimensionScore', 'validate_weights']
