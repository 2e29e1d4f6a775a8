# radar_config.py
import json
import logging
import os

from errors import RadarConfigError

logger = logging.getLogger("radar.config")

DEFAULT_UPDATE_INTERVAL_MS = 500  # Update positions every 500ms
DEFAULT_MARKER_IMAGE = "Player.png"
DEFAULT_MARKER_PREFIX = "radar_"

ENV_OVERRIDES = {
    "RADAR_UPDATE_INTERVAL_MS": "update_interval_ms",
    "RADAR_MARKER_IMAGE": "marker_image",
    "RADAR_MARKER_PREFIX": "marker_prefix",
}


class RadarConfig:
    def __init__(self, update_interval_ms=DEFAULT_UPDATE_INTERVAL_MS,
                 marker_image=DEFAULT_MARKER_IMAGE,
                 marker_prefix=DEFAULT_MARKER_PREFIX):
        self.update_interval_ms = update_interval_ms
        self.marker_image = marker_image
        self.marker_prefix = marker_prefix
        self.validate()

    @property
    def update_interval(self) -> float:
        """Tick interval in seconds."""
        return self.update_interval_ms / 1000.0

    def validate(self):
        interval = self.update_interval_ms
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
            raise RadarConfigError(f"update_interval_ms must be a positive number, got {interval!r}")
        if not isinstance(self.marker_image, str) or not self.marker_image:
            raise RadarConfigError("marker_image must be a non-empty string")
        if not isinstance(self.marker_prefix, str):
            raise RadarConfigError("marker_prefix must be a string")

    def to_data(self):
        return {
            "update_interval_ms": self.update_interval_ms,
            "marker_image": self.marker_image,
            "marker_prefix": self.marker_prefix,
        }

    def __repr__(self):
        return f"<RadarConfig interval={self.update_interval_ms}ms image={self.marker_image!r} prefix={self.marker_prefix!r}>"


def _env_values(environ):
    values = {}
    for env_key, field in ENV_OVERRIDES.items():
        raw = environ.get(env_key)
        if raw is None:
            continue
        if field == "update_interval_ms":
            try:
                values[field] = int(raw)
            except ValueError:
                raise RadarConfigError(f"{env_key} must be an integer, got {raw!r}")
        else:
            values[field] = raw
    return values


def load_config(config_file="radar.json", environ=None) -> RadarConfig:
    """Build a RadarConfig from an optional JSON file plus environment overrides.

    Unknown keys in the file are ignored. A missing file is not an error.
    """
    if environ is None:
        environ = os.environ

    values = {}
    if config_file and os.path.exists(config_file):
        with open(config_file, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise RadarConfigError(f"Config file {config_file} is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise RadarConfigError(f"Config file {config_file} must contain a JSON object")
        for field in ENV_OVERRIDES.values():
            if field in data:
                values[field] = data[field]
        logger.info("[RADAR] Loaded config from %s", config_file)
    else:
        logger.info("[RADAR] Config file %s not found, using defaults.", config_file)

    values.update(_env_values(environ))
    return RadarConfig(**values)
