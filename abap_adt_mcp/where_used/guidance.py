"""Manual-lookup guidance returned when no strategy finds usages.

Output depends only on the query and the outcomes, so identical inputs give
identical text.
"""

from ..results import ContentItem
from .classify import OutcomeStatus
from .query import RETRY_TYPE_NAMES, ObjectType

MANUAL_ALTERNATIVES = (
    "SAP GUI SE80: open the object, then Utilities > Where-Used List",
    "SAP GUI SE11 (dictionary objects): enter the name, then Where-Used List (Ctrl+Shift+F3)",
    "ADT in Eclipse: right-click the object, then Get Where-used List (Ctrl+Shift+G)",
    "SE84 Repository Information System: search by object name and type",
    'Report RS_ABAP_SOURCE_SCAN or transaction CODE_SCANNER: scan source code for "{name}"',
)


def _declared(query):
    if query.declared_type is ObjectType.UNKNOWN:
        return "not specified"
    return query.declared_type.value


def _outcome_line(index, outcome):
    strategy = outcome.strategy
    status = outcome.status.value
    if outcome.status is OutcomeStatus.ERROR:
        detail = f"HTTP {outcome.status_code}" if outcome.status_code else "transport failure"
        status = f"{status} ({detail})"
    return f"  {index}. {strategy.label} ({strategy.remote_object_type}): {status}"


def _alternatives(name):
    return [
        f"  {i}. {alternative.format(name=name)}"
        for i, alternative in enumerate(MANUAL_ALTERNATIVES, start=1)
    ]


def _retry_line():
    return "Retry GetWhereUsed with object_type set to one of: " + ", ".join(RETRY_TYPE_NAMES)


def format_guidance(query, outcomes):
    """Build the guidance document for an unresolved where-used query."""
    outcomes = tuple(outcomes)
    counts = {status: 0 for status in OutcomeStatus}
    for outcome in outcomes:
        counts[outcome.status] += 1

    lines = [
        f"Where-used information not available for {query.name}",
        "",
        f"Object: {query.name}",
        f"Declared type: {_declared(query)}",
        f"Result cap: {query.max_results}",
        "",
        (
            f"Automated lookup: {len(outcomes)} strategies attempted, "
            f"{counts[OutcomeStatus.HIT]} hit, {counts[OutcomeStatus.EMPTY]} empty, "
            f"{counts[OutcomeStatus.ERROR]} failed"
        ),
    ]
    lines.extend(_outcome_line(i, o) for i, o in enumerate(outcomes, start=1))
    lines += [
        "",
        "The ADT usage index returned no references for this object. "
        "This does not prove the object is unused. Check manually:",
    ]
    lines.extend(_alternatives(query.name))
    lines += ["", _retry_line()]
    return ContentItem(text="\n".join(lines))


def format_unexpected_error(name, error):
    """Diagnostic text for a failure outside the per-strategy loop."""
    lines = [
        f"Error: unexpected failure while resolving where-used for {name}: "
        f"{type(error).__name__}: {error}",
        "",
        "Check manually:",
    ]
    lines.extend(_alternatives(name))
    return ContentItem(text="\n".join(lines))
