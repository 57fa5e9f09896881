import yaml
import os
from typing import List, Optional, Dict
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str
    echo: bool = False


class ScoringWeights(BaseModel):
    """Weights for each dimension of the composite score.

    Must sum to 1.0; validated when the ScoringEngine is constructed so a bad
    config stops the process before any scoring happens.
    """
    skills: float = 0.35
    experience: float = 0.15
    salary: float = 0.15
    location: float = 0.12
    industry: float = 0.10
    sa_context: float = 0.08
    availability: float = 0.05

    def as_dict(self) -> Dict[str, float]:
        return self.model_dump()


class ExperienceCurveConfig(BaseModel):
    # Score reaches 0 at decay_floor_ratio * min_required
    decay_floor_ratio: float = 0.5
    # No penalty up to overqualification_multiple * min_required
    overqualification_multiple: float = 2.0
    overqualification_penalty: float = 5.0  # points per extra multiple
    overqualification_floor: float = 60.0


class SalaryConfig(BaseModel):
    tolerance_ratio: float = 0.20  # fraction of job max
    near_miss_max_score: float = 30.0


class LocationScores(BaseModel):
    same_city: float = 100.0
    same_province: float = 60.0
    same_country: float = 20.0
    remote: float = 100.0


class IndustryScores(BaseModel):
    exact: float = 100.0
    same_parent: float = 60.0


class SAContextConfig(BaseModel):
    """B-BBEE / NQF / language blend for the SA-context dimension."""
    bbbee_weight: float = 1.0 / 3.0
    nqf_weight: float = 1.0 / 3.0
    language_weight: float = 1.0 / 3.0
    bbbee_level_step_penalty: float = 25.0
    nqf_one_below_score: float = 50.0


class AvailabilityConfig(BaseModel):
    # Urgency label -> hiring deadline in weeks
    urgency_deadline_weeks: Dict[str, float] = Field(default_factory=lambda: {
        'immediate': 1.0,
        'urgent': 2.0,
        'high': 2.0,
        'normal': 4.0,
        'medium': 4.0,
        'low': 8.0,
        'flexible': 12.0,
    })
    decay_multiple: float = 2.0


class ScorerConfig(BaseModel):
    """
    Configuration for the ScoringEngine.

    All curve constants live here so they can be tuned without code changes.
    """
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    weight_tolerance: float = 1e-6
    required_skill_multiplier: float = 2.0
    preferred_skill_multiplier: float = 1.0
    experience: ExperienceCurveConfig = Field(default_factory=ExperienceCurveConfig)
    salary: SalaryConfig = Field(default_factory=SalaryConfig)
    location: LocationScores = Field(default_factory=LocationScores)
    industry: IndustryScores = Field(default_factory=IndustryScores)
    sa_context: SAContextConfig = Field(default_factory=SAContextConfig)
    availability: AvailabilityConfig = Field(default_factory=AvailabilityConfig)


class PriorityPolicyConfig(BaseModel):
    """
    Missing-skill priority table.

    Tier = table[weight_bucket][demand_band]. Buckets and bands are matched
    top-down by their minimum value.
    """
    weight_buckets: Dict[str, float] = Field(default_factory=lambda: {
        'high': 0.7,
        'medium': 0.4,
        'low': 0.0,
    })
    demand_bands: Dict[str, float] = Field(default_factory=lambda: {
        'hot': 1.2,
        'normal': 0.8,
        'cold': 0.0,
    })
    table: Dict[str, Dict[str, str]] = Field(default_factory=lambda: {
        'high': {'hot': 'critical', 'normal': 'critical', 'cold': 'high'},
        'medium': {'hot': 'high', 'normal': 'medium', 'cold': 'low'},
        'low': {'hot': 'medium', 'normal': 'low', 'cold': 'low'},
    })
    preferred_cap: str = 'medium'


class GapConfig(BaseModel):
    priority: PriorityPolicyConfig = Field(default_factory=PriorityPolicyConfig)
    # Skill id -> demand multiplier; unknown skills use default_demand
    market_demand: Dict[str, float] = Field(default_factory=dict)
    default_demand: float = 1.0


class ExplainConfig(BaseModel):
    reason_threshold: float = 70.0
    suggestion_threshold: float = 50.0
    max_reasons: int = 3
    max_suggestions: int = 2
    missing_skills_in_suggestion: int = 3


class MatchingConfig(BaseModel):
    """
    Top-level matching configuration.
    """
    synonyms_file: Optional[str] = None  # None = bundled table
    scorer: ScorerConfig = Field(default_factory=ScorerConfig)
    gaps: GapConfig = Field(default_factory=GapConfig)
    explain: ExplainConfig = Field(default_factory=ExplainConfig)


class RecomputeConfig(BaseModel):
    """Async recompute settings."""
    use_async_queue: bool = False
    redis_url: Optional[str] = None
    queue_name: str = 'recompute'
    job_timeout: str = '5m'
    max_workers: int = 4
    # run sync-mode tasks on the caller's thread (tests); background thread otherwise
    inline: bool = False


class ContactConfig(BaseModel):
    payment_timeout_minutes: int = 30
    unlock_amount: float = 99.0
    currency: str = 'ZAR'


class CacheConfig(BaseModel):
    backend: str = 'memory'  # "memory" or "redis"
    ttl_seconds: int = 3600
    max_entries: int = 10000
    redis_url: Optional[str] = None


class AppConfig(BaseModel):
    database: DatabaseConfig
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    recompute: RecomputeConfig = Field(default_factory=RecomputeConfig)
    contact: ContactConfig = Field(default_factory=ContactConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        data['database']['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if data.get('recompute') is None:
            data['recompute'] = {}
        data['recompute']['redis_url'] = env_redis_url
        if data.get('cache') is None:
            data['cache'] = {}
        data['cache'].setdefault('redis_url', env_redis_url)

    return AppConfig(**data)
