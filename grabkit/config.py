import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from blinker import Signal
from platformdirs import user_config_dir

logger = logging.getLogger(__name__)


CONFIG_DIR = Path(user_config_dir("grabkit"))
CONFIG_FILE = CONFIG_DIR / "config.yaml"


def getflag(name, default=False):
    default = "true" if default else "false"
    return os.environ.get(name, default).lower() in ("true", "1")


class Config:
    """
    Tunables of the manipulation engine. Every engine component takes one;
    a default-constructed Config reproduces the stock behaviour.
    """

    DEFAULTS: Dict[str, Any] = {
        "scene_unit": 5.0,
        "scale_step": 0.1,
        "translation_step": 0.1,
        "rotation_step_deg": 10,
        "crop_min": 0.1,
        "crop_max": 1.0,
        "min_scale": 0.01,
        "arrows_movement_factor": 0.1,
        "handle_radius": 0.15,
        "zoom_min": 0.3,
        "zoom_max": 3.0,
        "current_workspace": "background",
        "key_bindings": {
            "proportional": "shift",
            "discretize": "alt",
            "override": "ctrl",
        },
    }

    def __init__(self):
        for key, value in self.DEFAULTS.items():
            setattr(self, key, dict(value) if isinstance(value, dict)
                    else value)
        self.changed = Signal()

    def set(self, key: str, value: Any):
        if key not in self.DEFAULTS:
            raise ValueError(f"Unknown config key '{key}'")
        if getattr(self, key) == value:
            return
        setattr(self, key, value)
        self.changed.send(self, key=key)

    def validate(self):
        if not 0 < self.crop_min <= self.crop_max:
            raise ValueError(
                f"Invalid crop range [{self.crop_min}, {self.crop_max}]"
            )
        if self.min_scale <= 0:
            raise ValueError("min_scale must be positive")
        for key in ("scale_step", "translation_step", "rotation_step_deg",
                    "scene_unit"):
            if getattr(self, key) <= 0:
                raise ValueError(f"{key} must be positive")
        if not 0 < self.zoom_min < self.zoom_max:
            raise ValueError("zoom_min must be below zoom_max")

    def transform_limits(self) -> Dict[str, float]:
        """Keyword arguments for TransformState honouring this config."""
        return {
            "crop_min": self.crop_min,
            "crop_max": self.crop_max,
            "min_scale": self.min_scale,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, key) for key in self.DEFAULTS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        config = cls()
        for key, value in data.items():
            if key not in cls.DEFAULTS:
                logger.warning(f"Ignoring unknown config key '{key}'")
                continue
            if key == "key_bindings":
                config.key_bindings.update(value or {})
            else:
                setattr(config, key, value)
        config.validate()
        return config


class ConfigManager:
    def __init__(self, filepath: Optional[Path] = None):
        self.filepath = Path(filepath) if filepath else CONFIG_FILE
        self.config: Config = Config()
        self.load_config()

    def save(self):
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(self.filepath, "w") as f:
            yaml.safe_dump(self.config.to_dict(), f)
        logger.debug(f"Config saved to {self.filepath}")

    def load_config(self) -> Config:
        if not self.filepath.exists():
            self.config = Config()
            return self.config

        with open(self.filepath, "r") as f:
            data = yaml.safe_load(f)
        if not data:
            self.config = Config()
            return self.config
        self.config = Config.from_dict(data)
        logger.info(f"Config loaded from {self.filepath}")
        return self.config
