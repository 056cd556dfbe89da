from dataclasses import dataclass
from enum import Enum, auto
from .outcome import Outcome


class Cursor(Enum):
    ARROW = auto()
    RESIZE_ALL = auto()
    RESIZE_NS = auto()
    RESIZE_EW = auto()
    RESIZE_NESW = auto()
    RESIZE_NWSE = auto()
    HAND = auto()
    NOT_ALLOWED = auto()


@dataclass(frozen=True)
class GrabResult:
    """What the host shows after a drag frame: cursor shape and status."""

    cursor: Cursor = Cursor.ARROW
    info: str = ""
    outcome: Outcome = Outcome.OK

    @classmethod
    def neutral(cls, outcome: Outcome) -> "GrabResult":
        return cls(Cursor.ARROW, "", outcome)
