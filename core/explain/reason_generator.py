#!/usr/bin/env python3
"""
Reason Generator - turns a score breakdown into match reasons and
improvement suggestions.

Selection:
- sub-scores >= reason_threshold are reason candidates, ranked by
  weight * score, top max_reasons kept
- sub-scores < suggestion_threshold are suggestion candidates, ranked by
  weight * lost points, top max_suggestions kept

Ties fall back to dimension order, so identical inputs always yield
identical strings.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from core.config_loader import ExplainConfig
from core.normalizer.models import DIMENSIONS
from core.scorer.models import CompositeScore, DimensionScore
from core.analysis.gap_analyzer import SkillGap
from core.explain.rules import RULES, TEMPLATES, DIMENSION_LABELS, REASON, SUGGESTION, Rule

logger = logging.getLogger(__name__)


class ReasonGenerator:
    """Renders reasons/suggestions from a declarative rule table."""

    def __init__(
        self,
        config: Optional[ExplainConfig] = None,
        rules: Optional[Sequence[Rule]] = None,
        templates: Optional[Dict[str, str]] = None
    ):
        self.config = config or ExplainConfig()
        self.rules = list(rules if rules is not None else RULES)
        self.templates = dict(templates if templates is not None else TEMPLATES)

    def generate_explanations(
        self,
        breakdown: CompositeScore,
        missing_skills: Sequence[SkillGap] = ()
    ) -> Tuple[List[str], List[str]]:
        order = {name: i for i, name in enumerate(DIMENSIONS)}
        dims = sorted(breakdown.dimensions.values(), key=lambda d: order.get(d.name, len(order)))

        reason_dims = [
            d for d in dims
            if not d.unknown and d.score >= self.config.reason_threshold
        ]
        reason_dims.sort(key=lambda d: (-d.weight * d.score, order.get(d.name, len(order))))

        suggestion_dims = [d for d in dims if d.score < self.config.suggestion_threshold]
        suggestion_dims.sort(key=lambda d: (-d.weight * (100.0 - d.score), order.get(d.name, len(order))))

        missing_text = self._missing_skills_text(missing_skills)
        reasons = self._render_all(reason_dims, REASON, self.config.max_reasons, missing_text)
        suggestions = self._render_all(suggestion_dims, SUGGESTION, self.config.max_suggestions, missing_text)
        return reasons, suggestions

    def _missing_skills_text(self, missing_skills: Sequence[SkillGap]) -> str:
        # required gaps first, then the analyzer's weight order
        ranked = [g for g in missing_skills if g.is_required] + [g for g in missing_skills if not g.is_required]
        return ", ".join(g.skill_id for g in ranked[:self.config.missing_skills_in_suggestion])

    def _render_all(self, dims: List[DimensionScore], kind: str, limit: int, missing_text: str) -> List[str]:
        rendered: List[str] = []
        for dim in dims:
            if len(rendered) >= limit:
                break
            text = self._render(dim, kind, missing_text)
            if text and text not in rendered:
                rendered.append(text)
        return rendered

    def _render(self, dim: DimensionScore, kind: str, missing_text: str) -> Optional[str]:
        ctx = self._context(dim, missing_text)
        for rule in self.rules:
            if rule.dimension != dim.name or rule.kind != kind or not rule.condition(ctx):
                continue
            template = self.templates.get(rule.template)
            if template is None:
                logger.warning(f"No template '{rule.template}' for {kind} on {dim.name}")
                return None
            try:
                return template.format_map(ctx)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Could not render template '{rule.template}' for {dim.name}: {e}")
                return None
        return None

    @staticmethod
    def _context(dim: DimensionScore, missing_text: str) -> Dict[str, Any]:
        ctx: Dict[str, Any] = {}
        for key, value in dim.details.items():
            ctx[key] = ", ".join(str(v) for v in value) if isinstance(value, (list, tuple)) else value
        ctx.update({
            'dimension': dim.name,
            'dimension_label': DIMENSION_LABELS.get(dim.name, dim.name),
            'score': dim.score,
            'unknown': dim.unknown,
            'missing_skills': missing_text,
        })
        return ctx
