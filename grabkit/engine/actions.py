"""
Context menu actions on the current item. Each takes the item's transform
and aspect ratio and returns a new TransformState; the input is untouched.
"""
from typing import Callable, Dict, Optional
from ..core.transform import TransformState


def reset(state: TransformState, aspect_ratio: float) -> TransformState:
    new_state = state.copy()
    new_state.reset()
    return new_state


def fit(
    state: TransformState,
    aspect_ratio: float,
    output_aspect: Optional[float] = None,
) -> TransformState:
    """
    Fills the output frame: unit height, width stretched to the output
    aspect ratio, centered and upright. Crop is kept.
    """
    new_state = state.copy()
    sx = output_aspect / aspect_ratio if output_aspect else 1.0
    new_state.scale = (sx, 1.0, 1.0)
    new_state.rotation_z = 0.0
    new_state.translation = (0.0, 0.0, 0.0)
    return new_state


def center(state: TransformState, aspect_ratio: float) -> TransformState:
    new_state = state.copy()
    new_state.translation = (0.0, 0.0, 0.0)
    return new_state


def restore_aspect_ratio(
    state: TransformState, aspect_ratio: float
) -> TransformState:
    """Makes the visible part undistorted again, keeping its height."""
    new_state = state.copy()
    sx = state.scale[1] * state.crop[0] / state.crop[1]
    new_state.scale = (sx, state.scale[1], state.scale[2])
    return new_state


MenuAction = Callable[..., TransformState]

MENU_ACTIONS: Dict[str, MenuAction] = {
    "reset": reset,
    "fit": fit,
    "center": center,
    "original_aspect_ratio": restore_aspect_ratio,
}


def labels() -> Dict[str, str]:
    return {
        "reset": _("Reset"),
        "fit": _("Fit"),
        "center": _("Center"),
        "original_aspect_ratio": _("Original aspect ratio"),
    }
