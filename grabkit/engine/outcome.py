from enum import Enum, auto


class Outcome(Enum):
    """
    How a pick or a drag frame went. None of these are failures for the
    caller: every non-OK outcome comes with a neutral, usable result.
    """

    OK = auto()
    NO_TARGET = auto()
    LOCKED_TARGET = auto()
    MULTI_SELECTION_SUPPRESSED = auto()
    DEGENERATE_TRANSFORM = auto()
    SESSION_ACTIVE = auto()
