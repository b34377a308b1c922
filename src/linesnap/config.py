"""
Configuration for the line snap engine.

Defaults live in ``_DefaultConfig``. A user file pointed to by the
``LINESNAP_CONFIG`` environment variable may redefine any of the ``*_CONFIG``
dictionaries; missing keys fall back to the defaults.
"""

import importlib.util
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LINESNAP_CONFIG"


class _DefaultConfig:
    RENDER_CONFIG = {"render_scale": 2.0}
    CONTOUR_CONFIG = {
        "contrast": 2.0,
        "dark_on_light": True,
        "binarize": "otsu",
        "adaptive_block_size": 41,
        "adaptive_c": 10,
        "thin_strokes": True,
        "simplify_epsilon": 3.0,
    }
    SEGMENT_CONFIG = {
        "min_segment_length": 15.0,
        "min_line_length": 30.0,
        "collinearity_threshold": 0.95,
        "merge_gap": 15.0,
    }
    SNAP_CONFIG = {
        "search_radius": 250.0,
        "corner_snap_distance": 40.0,
        "line_snap_distance": 50.0,
        "tap_proximity": 50.0,
        "corner_proximity": 30.0,
        "max_corner_lines": 4,
        "endpoint_threshold": 30.0,
    }
    EXTENSION_CONFIG = {
        "search_distance": 200.0,
        "collinearity_threshold": 0.9,
        "max_endpoint_gap": 50.0,
    }
    LOGGING_CONFIG = {"level": "INFO", "format": "%(asctime)s %(levelname)s %(name)s %(message)s"}
    PERFORMANCE_CONFIG = {"memory_limit_mb": 2048, "max_image_dimension": 6000}


_SECTIONS = (
    "RENDER_CONFIG",
    "CONTOUR_CONFIG",
    "SEGMENT_CONFIG",
    "SNAP_CONFIG",
    "EXTENSION_CONFIG",
    "LOGGING_CONFIG",
    "PERFORMANCE_CONFIG",
)


def _load_user_config(path: Optional[str] = None):
    """Load a user config module from path or the LINESNAP_CONFIG variable."""
    cfg_path = path or os.environ.get(CONFIG_ENV_VAR)
    if not cfg_path:
        return None
    cfg_file = Path(cfg_path)
    if not cfg_file.exists():
        raise ConfigurationError(f"config file not found: {cfg_file}", CONFIG_ENV_VAR)
    spec = importlib.util.spec_from_file_location("linesnap_user_config", str(cfg_file))
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"cannot load config file: {cfg_file}", CONFIG_ENV_VAR)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    logger.info(f"Loaded user config: {cfg_file}")
    return mod


def load_settings(path: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
    """Merge the user config over the defaults, section by section."""
    user_cfg = _load_user_config(path)
    settings: Dict[str, Dict[str, Any]] = {}
    for section in _SECTIONS:
        merged = dict(getattr(_DefaultConfig, section))
        if user_cfg is not None and hasattr(user_cfg, section):
            override = getattr(user_cfg, section)
            if not isinstance(override, dict):
                raise ConfigurationError("section must be a dict", section)
            merged.update(override)
        settings[section] = merged
    return settings


_settings = load_settings()

RENDER_CONFIG = _settings["RENDER_CONFIG"]
CONTOUR_CONFIG = _settings["CONTOUR_CONFIG"]
SEGMENT_CONFIG = _settings["SEGMENT_CONFIG"]
SNAP_CONFIG = _settings["SNAP_CONFIG"]
EXTENSION_CONFIG = _settings["EXTENSION_CONFIG"]
LOGGING_CONFIG = _settings["LOGGING_CONFIG"]
PERFORMANCE_CONFIG = _settings["PERFORMANCE_CONFIG"]


@dataclass(frozen=True)
class DetectionConfig:
    """Typed thresholds for one detection engine.

    Distances are in screen units unless noted; ``simplify_epsilon`` is in
    crop pixels and ``extension_search_distance`` in page units.
    """

    render_scale: float = 2.0
    simplify_epsilon: float = 3.0
    min_segment_length: float = 15.0
    min_line_length: float = 30.0
    collinearity_threshold: float = 0.95
    merge_gap: float = 15.0
    search_radius: float = 250.0
    corner_snap_distance: float = 40.0
    line_snap_distance: float = 50.0
    tap_proximity: float = 50.0
    corner_proximity: float = 30.0
    max_corner_lines: int = 4
    endpoint_threshold: float = 30.0
    extension_search_distance: float = 200.0
    extension_collinearity: float = 0.9
    extension_max_gap: float = 50.0

    @classmethod
    def from_settings(cls, settings: Optional[Dict[str, Dict[str, Any]]] = None) -> "DetectionConfig":
        if settings is None:
            settings = _settings
        render = settings["RENDER_CONFIG"]
        contour = settings["CONTOUR_CONFIG"]
        segment = settings["SEGMENT_CONFIG"]
        snap = settings["SNAP_CONFIG"]
        ext = settings["EXTENSION_CONFIG"]
        return cls(
            render_scale=float(render["render_scale"]),
            simplify_epsilon=float(contour["simplify_epsilon"]),
            min_segment_length=float(segment["min_segment_length"]),
            min_line_length=float(segment["min_line_length"]),
            collinearity_threshold=float(segment["collinearity_threshold"]),
            merge_gap=float(segment["merge_gap"]),
            search_radius=float(snap["search_radius"]),
            corner_snap_distance=float(snap["corner_snap_distance"]),
            line_snap_distance=float(snap["line_snap_distance"]),
            tap_proximity=float(snap["tap_proximity"]),
            corner_proximity=float(snap["corner_proximity"]),
            max_corner_lines=int(snap["max_corner_lines"]),
            endpoint_threshold=float(snap["endpoint_threshold"]),
            extension_search_distance=float(ext["search_distance"]),
            extension_collinearity=float(ext["collinearity_threshold"]),
            extension_max_gap=float(ext["max_endpoint_gap"]),
        )

    def with_overrides(self, **overrides: Any) -> "DetectionConfig":
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"unknown settings: {', '.join(sorted(unknown))}")
        return replace(self, **overrides)
