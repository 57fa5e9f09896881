from dataclasses import dataclass
from functools import partial
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from core.analysis import GapAnalyzer, PriorityPolicy, StaticMarketDemand, CachedMarketDemand
from core.cache import LookupCache, build_lookup_cache
from core.config_loader import AppConfig, MatchingConfig
from core.contact import ContactGateService
from core.explain import ReasonGenerator
from core.match_service import MatchService
from core.normalizer import ProfileNormalizer, SynonymTable
from core.profile_service import ProfileService
from core.scorer import ScoringEngine
from database.database import create_db_engine, create_session_factory
from pipeline.queue import RecomputeQueue, dispatch_recompute


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access should be obtained
    via match_uow() inside each operation.
    """
    config: AppConfig
    engine: Engine
    session_factory: sessionmaker
    lookup_cache: LookupCache
    match_service: MatchService
    profile_service: ProfileService
    recompute_queue: RecomputeQueue

    @classmethod
    def build(cls, config: AppConfig, engine: Optional[Engine] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            engine: Existing SQLAlchemy engine (tests); built from config.database otherwise

        Returns:
            Fully wired AppContext instance

        Raises:
            InvalidWeightConfiguration: if the scorer weights do not sum to 1
        """
        engine = engine or create_db_engine(config.database.url, echo=config.database.echo)
        session_factory = create_session_factory(engine)
        lookup_cache = build_lookup_cache(config.cache)

        # Scoring engine validates weights before anything else is wired
        scoring_engine = ScoringEngine(config.matching.scorer)
        normalizer = cls._build_normalizer(config.matching)
        gap_analyzer = cls._build_gap_analyzer(config.matching, lookup_cache)

        match_service = MatchService(
            session_factory=session_factory,
            normalizer=normalizer,
            engine=scoring_engine,
            gap_analyzer=gap_analyzer,
            reason_generator=ReasonGenerator(config.matching.explain),
            contact_gate=ContactGateService(session_factory, config.contact),
            max_workers=config.recompute.max_workers,
        )

        recompute_queue = RecomputeQueue(
            config.recompute,
            sync_handler=partial(dispatch_recompute, match_service)
        )
        profile_service = ProfileService(session_factory, recompute_queue)

        return cls(
            config=config,
            engine=engine,
            session_factory=session_factory,
            lookup_cache=lookup_cache,
            match_service=match_service,
            profile_service=profile_service,
            recompute_queue=recompute_queue,
        )

    @staticmethod
    def _build_normalizer(matching: MatchingConfig) -> ProfileNormalizer:
        if matching.synonyms_file:
            synonyms = SynonymTable.from_yaml(matching.synonyms_file)
        else:
            synonyms = SynonymTable.default()
        return ProfileNormalizer(synonyms, matching.scorer.availability)

    @staticmethod
    def _build_gap_analyzer(matching: MatchingConfig, cache: LookupCache) -> GapAnalyzer:
        gaps = matching.gaps
        demand = CachedMarketDemand(
            StaticMarketDemand(gaps.market_demand, default=gaps.default_demand),
            cache
        )
        return GapAnalyzer(PriorityPolicy(gaps.priority), demand)

    def close(self) -> None:
        # let background recomputes finish before the engine goes away
        self.recompute_queue.shutdown()
        self.engine.dispose()
