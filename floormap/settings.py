"""ConfigManager — environment profiles, layered settings and logging level.

Settings are flat ``FLOORMAP_*`` string keys.  Each layer overrides the one
before it::

    defaults -> profile (FLOORMAP_ENV) -> .floormap/config.json -> .env -> environment

:class:`EditorConfig` is the typed view an editor session consumes.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, NamedTuple

from pydantic import BaseModel, Field, field_validator

from floormap.config import ZOOM_SENSITIVITY
from floormap.graph.distance import DEFAULT_DISTANCE_POLICY, DistancePolicy, get_distance_policy
from floormap.models.floorplan import UnitMode

logger = logging.getLogger(__name__)

CONFIG_DIR = ".floormap"
CONFIG_FILE = "config.json"
ENV_FILE = ".env"


class Setting(NamedTuple):
    key: str
    field: str | None
    default: str
    description: str


# Known keys, the EditorConfig field each one feeds, and file defaults
SETTINGS: tuple[Setting, ...] = (
    Setting("FLOORMAP_ENV", None, "development", "Environment profile"),
    Setting("FLOORMAP_DB", "db_path", "floormap.db", "Structured store database path"),
    Setting("FLOORMAP_BLOB_DB", "blob_db_path", "floormap_images.db", "Image store database path"),
    Setting("FLOORMAP_DISTANCE_POLICY", "distance_policy", DEFAULT_DISTANCE_POLICY,
            "Connection distance: euclidean or zero"),
    Setting("FLOORMAP_ZOOM_SENSITIVITY", "zoom_sensitivity", str(ZOOM_SENSITIVITY),
            "Wheel zoom sensitivity"),
    Setting("FLOORMAP_UNIT_MODE", "unit_mode", UnitMode.PERCENTAGE.value,
            "Coordinate unit for new floor plans"),
    Setting("FLOORMAP_LOG_LEVEL", "log_level", "INFO", "Logging level"),
)

PROFILES: dict[str, dict[str, str]] = {
    "development": {"FLOORMAP_LOG_LEVEL": "DEBUG"},
    "production": {"FLOORMAP_LOG_LEVEL": "WARNING"},
    "testing": {
        "FLOORMAP_LOG_LEVEL": "DEBUG",
        "FLOORMAP_DB": ":memory:",
        "FLOORMAP_BLOB_DB": ":memory:",
    },
}


class EditorConfig(BaseModel):
    """Typed view of the settings an editor session needs."""

    db_path: str = ":memory:"
    blob_db_path: str = ":memory:"
    distance_policy: str = DEFAULT_DISTANCE_POLICY
    zoom_sensitivity: float = Field(default=ZOOM_SENSITIVITY, gt=0)
    unit_mode: UnitMode = UnitMode.PERCENTAGE
    log_level: str = "INFO"

    @field_validator("distance_policy", "unit_mode", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @classmethod
    def from_config(cls, config: Mapping[str, str]) -> EditorConfig:
        """Build from flat ``FLOORMAP_*`` keys; absent keys keep field defaults."""
        values = {
            s.field: config[s.key]
            for s in SETTINGS
            if s.field is not None and s.key in config
        }
        return cls.model_validate(values)

    def make_distance_policy(self) -> DistancePolicy:
        return get_distance_policy(self.distance_policy)


def _read_config_json(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        logger.warning("Ignoring unreadable %s", path, exc_info=True)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return {}
    return {str(k): str(v) for k, v in data.items()}


def _read_env_file(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        logger.warning("Ignoring unreadable %s", path, exc_info=True)
        return {}
    values: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip()
    return values


class ConfigManager:
    """Manage floormap configuration across environments.

    Parameters
    ----------
    environ:
        Environment mapping consulted for the profile name and the final
        override layer (default: ``os.environ``).
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def generate_env_template(self, project_path: str | Path) -> Path:
        """Write ``.env.example`` listing every known key with its default."""
        env_path = Path(project_path) / ".env.example"
        lines = ["# floormap configuration template", "# Copy to .env and fill in values", ""]
        for setting in SETTINGS:
            lines += [f"# {setting.description}", f"{setting.key}={setting.default}", ""]
        env_path.write_text("\n".join(lines), encoding="utf-8")
        return env_path

    def _layers(self, root: Path) -> list[dict[str, str]]:
        defaults = {s.key: s.default for s in SETTINGS}
        env_name = self._environ.get("FLOORMAP_ENV", defaults["FLOORMAP_ENV"])
        profile = {"FLOORMAP_ENV": env_name, **PROFILES.get(env_name, {})}
        overrides = {s.key: self._environ[s.key] for s in SETTINGS if s.key in self._environ}
        return [
            defaults,
            profile,
            _read_config_json(root / CONFIG_DIR / CONFIG_FILE),
            _read_env_file(root / ENV_FILE),
            overrides,
        ]

    def load_config(self, project_path: str | Path = ".") -> dict[str, str]:
        """Merged flat config for the project at *project_path*."""
        config: dict[str, str] = {}
        for layer in self._layers(Path(project_path)):
            config.update(layer)
        return config

    def load_editor_config(self, project_path: str | Path = ".") -> EditorConfig:
        return EditorConfig.from_config(self.load_config(project_path))


def configure_logging(config: EditorConfig | Mapping[str, str]) -> int:
    """Apply the configured level to the ``floormap`` logger hierarchy."""
    if isinstance(config, EditorConfig):
        name = config.log_level
    else:
        name = config.get("FLOORMAP_LOG_LEVEL", "INFO")
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        logger.warning("Unknown log level %r; using INFO", name)
        level = logging.INFO
    logging.getLogger("floormap").setLevel(level)
    return level
