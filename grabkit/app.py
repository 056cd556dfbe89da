# flake8: noqa: E402
import logging
import argparse
import sys
import gettext
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# --------------------------------------------------------
# Gettext MUST be initialized before importing app modules
# --------------------------------------------------------
base_dir = Path(__file__).parent.parent
locale_dir = base_dir / 'grabkit' / 'locale'
gettext.install("grabkit", locale_dir)

from grabkit.config import Config, ConfigManager, getflag
from grabkit.core.item import SceneItem
from grabkit.core.scene import Scene
from grabkit.core.transform import TransformState
from grabkit.engine.camera import OrthoCamera
from grabkit.engine.modifiers import Modifiers
from grabkit.engine.view import GeometryView

logger = logging.getLogger(__name__)


def load_scenario(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Scenario {path} must be a mapping")
    return data


def build_view(
    scenario: Dict[str, Any], config: Optional[Config] = None
) -> GeometryView:
    """Creates the scene, camera and view described by a scenario."""
    if config is None:
        config = Config.from_dict(scenario.get("config") or {})
    viewport = scenario.get("viewport", {})
    camera = OrthoCamera(
        viewport.get("width", 800),
        viewport.get("height", 600),
        viewport.get("dpi_scale", 1.0),
        config=config,
    )
    if "zoom" in scenario:
        camera.set_zoom_percent(scenario["zoom"])

    scene = Scene(config.current_workspace)
    by_name: Dict[str, SceneItem] = {}
    for entry in scenario.get("items", []):
        item = SceneItem(
            name=entry["name"],
            workspace=entry.get("workspace", config.current_workspace),
            aspect_ratio=entry.get("aspect_ratio", 1.0),
            transform=TransformState.from_dict(
                entry.get("transform", {}), **config.transform_limits()
            ),
        )
        item.set_locked(entry.get("locked", False))
        scene.add(item)
        by_name[item.name] = item

    current = scenario.get("current")
    if current is not None:
        if current not in by_name:
            raise ValueError(f"Unknown current item '{current}'")
        scene.set_current(by_name[current])
    scene.selection.set(
        [by_name[name] for name in scenario.get("selection", [])]
    )

    return GeometryView(
        scene, camera, config=config,
        output_aspect=scenario.get("output_aspect"),
    )


def replay(view: GeometryView, events: List[Dict[str, Any]]) -> List[str]:
    """
    Feeds the events to the view and returns one status line per event.
    """
    lines: List[str] = []
    for event in events:
        modifiers = Modifiers.from_keys(event.get("keys", []), view.config)
        if "press" in event:
            result = view.press(tuple(event["press"]), modifiers)
            name = result.item.name if result.item else "-"
            lines.append(f"press {name} {result.outcome.name}")
        elif "move" in event:
            grab = view.move(tuple(event["move"]), modifiers)
            lines.append(f"move {grab.cursor.name} {grab.info}")
        elif "release" in event:
            lines.append(f"release {view.release() or ''}".rstrip())
        elif "arrow" in event:
            grab = view.arrow(tuple(event["arrow"]), modifiers)
            lines.append(f"arrow {grab.outcome.name} {grab.info}")
        elif "menu" in event:
            lines.append(f"menu {view.apply_menu_action(event['menu'])}")
        else:
            raise ValueError(f"Unknown event {event!r}")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=_("Direct manipulation of 2D object transforms.")
    )
    parser.add_argument(
        '--loglevel',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help=_('Set the logging level (default: INFO)')
    )
    parser.add_argument(
        '--config',
        metavar="FILENAME",
        help=_("Path to a YAML config file."),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    replay_parser = subparsers.add_parser(
        "replay", help=_("Replay a scenario of pointer events.")
    )
    replay_parser.add_argument(
        "scenario", help=_("Path to the scenario YAML file.")
    )

    args = parser.parse_args(argv)

    # Set logging level based on the command-line argument
    log_level = getattr(logging, args.loglevel.upper(), logging.INFO)
    if getflag("GRABKIT_DEBUG"):
        log_level = logging.DEBUG
    logging.getLogger().setLevel(log_level)

    config = ConfigManager(Path(args.config)).config if args.config \
        else None
    scenario = load_scenario(Path(args.scenario))
    view = build_view(scenario, config)
    for line in replay(view, scenario.get("events", [])):
        print(line)

    final = {
        item.name: item.transform.to_dict() for item in view.scene.items
    }
    print(yaml.safe_dump(final, sort_keys=False), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
