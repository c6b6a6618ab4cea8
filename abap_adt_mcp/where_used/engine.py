"""Where-used resolution.

Strategies run one after another against the gateway. A transport error on
one strategy is recorded and the next one is tried; the first HIT ends the
run. When every strategy comes back empty or failed the caller gets the
guidance document as a successful result.
"""

from dataclasses import dataclass

from loguru import logger

from ..errors import TransportError
from ..results import ResolutionResult, normalize
from .classify import DEFAULT_MARKERS, OutcomeStatus, classify
from .guidance import format_guidance, format_unexpected_error
from .strategies import QueryStrategy, select_strategies


@dataclass(frozen=True)
class StrategyOutcome:
    strategy: QueryStrategy
    status: OutcomeStatus
    raw_body: str | None = None
    status_code: int | None = None
    error_detail: str | None = None


@dataclass(frozen=True)
class Resolution:
    result: ResolutionResult
    outcomes: tuple = ()


class WhereUsedResolver:
    """Resolves where-used queries through an ADT gateway.

    ``gateway`` needs a ``send(url, method, headers, timeout, data)`` method
    returning a RawResponse or raising TransportError.
    """

    def __init__(self, gateway, markers=DEFAULT_MARKERS, selector=select_strategies):
        self.gateway = gateway
        self.markers = markers
        self.selector = selector

    def resolve(self, query):
        return self.resolve_with_outcomes(query).result

    def resolve_with_outcomes(self, query):
        outcomes = []
        try:
            for strategy in self.selector(query):
                outcome, raw = self._attempt(strategy, query)
                outcomes.append(outcome)
                if outcome.status is OutcomeStatus.HIT:
                    logger.info(
                        "Where-used {} resolved by {} ({})",
                        query.name, strategy.label, strategy.remote_object_type,
                    )
                    return Resolution(normalize(raw), tuple(outcomes))
            logger.info(
                "Where-used {} unresolved after {} strategies, returning guidance",
                query.name, len(outcomes),
            )
            guidance = format_guidance(query, outcomes)
            return Resolution(ResolutionResult(is_error=False, content=(guidance,)), tuple(outcomes))
        except Exception as exc:
            logger.exception("Where-used {} failed unexpectedly", query.name)
            item = format_unexpected_error(query.name, exc)
            return Resolution(ResolutionResult(is_error=True, content=(item,)), tuple(outcomes))

    def _attempt(self, strategy, query):
        """Run one strategy; returns ``(outcome, raw_response_or_None)``."""
        url, body = strategy.render(query)
        try:
            raw = self.gateway.send(
                url,
                method=strategy.http_method,
                headers=strategy.headers(),
                timeout=strategy.timeout,
                data=body,
            )
        except TransportError as exc:
            logger.debug("Strategy {} failed for {}: {}", strategy.label, query.name, exc)
            outcome = StrategyOutcome(
                strategy=strategy,
                status=OutcomeStatus.ERROR,
                raw_body=exc.body,
                status_code=exc.status,
                error_detail=exc.message,
            )
            return outcome, None

        exclude = query.name if strategy.exclude_self else None
        status = classify(raw.body, strategy.response_kind, self.markers, exclude_name=exclude)
        logger.debug("Strategy {} for {}: {}", strategy.label, query.name, status.value)
        outcome = StrategyOutcome(
            strategy=strategy,
            status=status,
            raw_body=raw.body,
            status_code=raw.status_code,
        )
        return outcome, raw
