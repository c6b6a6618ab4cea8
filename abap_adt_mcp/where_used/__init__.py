"""Where-used resolution: strategy selection, probing and guidance."""

from .classify import DEFAULT_MARKERS, MarkerSet, OutcomeStatus, classify
from .engine import Resolution, StrategyOutcome, WhereUsedResolver
from .guidance import format_guidance
from .query import DEFAULT_MAX_RESULTS, RETRY_TYPE_NAMES, ObjectQuery, ObjectType
from .strategies import MAX_STRATEGIES, QueryStrategy, ResponseKind, select_strategies

__all__ = [
    "DEFAULT_MARKERS",
    "DEFAULT_MAX_RESULTS",
    "MAX_STRATEGIES",
    "MarkerSet",
    "ObjectQuery",
    "ObjectType",
    "OutcomeStatus",
    "QueryStrategy",
    "RETRY_TYPE_NAMES",
    "Resolution",
    "ResponseKind",
    "StrategyOutcome",
    "WhereUsedResolver",
    "classify",
    "format_guidance",
    "select_strategies",
]
