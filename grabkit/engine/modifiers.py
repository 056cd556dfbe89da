import math
from dataclasses import dataclass
from typing import Iterable, Optional
from ..config import Config


@dataclass(frozen=True)
class Modifiers:
    """
    Key modifier state sampled for one pick or one pointer move.

    proportional: keep aspect ratio, lock translation to one axis, or
        rotate without scaling.
    discretize: snap results to fixed steps.
    override: allow manipulating a locked item.
    """

    proportional: bool = False
    discretize: bool = False
    override: bool = False

    @classmethod
    def from_keys(
        cls, pressed: Iterable[str], config: Optional[Config] = None
    ) -> "Modifiers":
        bindings = (config or Config()).key_bindings
        keys = {k.lower() for k in pressed}
        return cls(
            proportional=bindings["proportional"] in keys,
            discretize=bindings["discretize"] in keys,
            override=bindings["override"] in keys,
        )


NO_MODIFIERS = Modifiers()


def snap(value: float, step: float) -> float:
    """Nearest multiple of step; halves round up."""
    return math.floor(value / step + 0.5) * step


def snap_degrees(angle_rad: float, step_deg: int) -> float:
    """
    Snaps an angle to whole multiples of step_deg degrees.

    Both the conversion to whole degrees and the division by the step
    truncate toward zero, so negative angles snap toward zero as well.
    """
    degrees = int(round(math.degrees(angle_rad), 9))
    degrees = int(degrees / step_deg) * step_deg
    return math.radians(degrees)
