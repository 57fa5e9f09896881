"""Match reasons and improvement suggestions."""
from core.explain.reason_generator import ReasonGenerator
from core.explain.rules import RULES, TEMPLATES, Rule

__all__ = ['ReasonGenerator', 'RULES', 'TEMPLATES', 'Rule']
