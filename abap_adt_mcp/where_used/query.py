"""The where-used request: object name, type hint and result cap."""

from dataclasses import dataclass
from enum import Enum

DEFAULT_MAX_RESULTS = 100


class ObjectType(str, Enum):
    CLASS = "CLASS"
    INTERFACE = "INTERFACE"
    PROGRAM = "PROGRAM"
    FUNCTION = "FUNCTION"
    TABLE = "TABLE"
    STRUCTURE = "STRUCTURE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value):
        """Map a caller-supplied type hint to an ObjectType.

        Hints are case-insensitive and accept the ADT short forms
        (``tabl``, ``clas``, ``prog`` ...). Anything unrecognized is
        ``UNKNOWN``: the hint is advisory, so a bad one is not an error.
        """
        if isinstance(value, cls):
            return value
        if not value:
            return cls.UNKNOWN
        key = str(value).strip().upper()
        return _ALIASES.get(key, cls.UNKNOWN)


RETRY_TYPES = tuple(t for t in ObjectType if t is not ObjectType.UNKNOWN)
RETRY_TYPE_NAMES = tuple(t.value for t in RETRY_TYPES)

_ALIASES = {t.value: t for t in ObjectType}
_ALIASES.update({
    "CLAS": ObjectType.CLASS,
    "CLAS/OC": ObjectType.CLASS,
    "INTF": ObjectType.INTERFACE,
    "INTF/OI": ObjectType.INTERFACE,
    "PROG": ObjectType.PROGRAM,
    "PROG/P": ObjectType.PROGRAM,
    "FUGR": ObjectType.FUNCTION,
    "FUGR/F": ObjectType.FUNCTION,
    "FUNCTION_GROUP": ObjectType.FUNCTION,
    "TABL": ObjectType.TABLE,
    "TABL/DT": ObjectType.TABLE,
    "TABL/DS": ObjectType.STRUCTURE,
})


@dataclass(frozen=True)
class ObjectQuery:
    name: str
    declared_type: ObjectType = ObjectType.UNKNOWN
    max_results: int = DEFAULT_MAX_RESULTS

    def __post_init__(self):
        name = str(self.name or "").strip().upper()
        if not name:
            raise ValueError("object name must not be empty")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "declared_type", ObjectType.parse(self.declared_type))
        object.__setattr__(self, "max_results", _cap(self.max_results))

    @classmethod
    def from_arguments(cls, arguments):
        """Build a query from GetWhereUsed tool arguments."""
        return cls(
            name=arguments.get("object_name") or "",
            declared_type=arguments.get("object_type"),
            max_results=arguments.get("max_results"),
        )


def _cap(value):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_RESULTS
    return value if value > 0 else DEFAULT_MAX_RESULTS
