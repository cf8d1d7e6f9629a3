"""
Settings Module for the Translation Overlay

Provides persistent storage for user preferences using JSON.
Settings are stored in config.json in the project root.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

logger = logging.getLogger(__name__)

# Settings file location (project root)
SETTINGS_FILE = Path("config.json")

# Default settings
DEFAULT_SETTINGS: Dict[str, Any] = {
    "debug_enabled": False,
    "auto_crop": False,
    "source_language": "en",
    "target_language": "it",
    "background_opacity": 0.8,   # 0.0-1.0
    "font_scale": 1.0,           # 0.5-2.0 in the UI, not enforced
    "font_path": None,           # TrueType font for overlay text (None = default)
    "recognizer": "tesseract",
    "translator": "argos",
    "crop_threshold": 40,
    "crop_stride": 10,
}


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings from config.json.

    Args:
        path: Settings file (default SETTINGS_FILE)

    Returns:
        Settings dictionary. Returns defaults if file missing or invalid.
    """
    path = path or SETTINGS_FILE
    if not path.exists():
        logger.debug("Settings file not found, using defaults")
        return DEFAULT_SETTINGS.copy()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            settings = json.load(f)

        if not isinstance(settings, dict):
            raise ValueError("settings root must be an object")

        # Merge with defaults to handle missing keys
        result = DEFAULT_SETTINGS.copy()
        result.update(settings)
        logger.debug(f"Settings loaded: {result}")
        return result

    except (json.JSONDecodeError, ValueError, IOError) as e:
        logger.warning(f"Failed to load settings: {e}, using defaults")
        return DEFAULT_SETTINGS.copy()


def save_settings(settings: Dict[str, Any], path: Optional[Path] = None) -> None:
    """
    Save settings to config.json.

    Args:
        settings: Settings dictionary to save
        path: Settings file (default SETTINGS_FILE)
    """
    path = path or SETTINGS_FILE
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2)
        logger.debug(f"Settings saved: {settings}")
    except IOError as e:
        logger.error(f"Failed to save settings: {e}")


def background_opacity(settings: Dict[str, Any]) -> float:
    """Overlay background opacity clamped to 0.0-1.0."""
    try:
        value = float(settings.get("background_opacity", DEFAULT_SETTINGS["background_opacity"]))
    except (TypeError, ValueError):
        logger.warning("Invalid background_opacity, using default")
        value = DEFAULT_SETTINGS["background_opacity"]
    return min(max(value, 0.0), 1.0)


def font_scale(settings: Dict[str, Any]) -> float:
    """User font scale. Any positive value is accepted."""
    try:
        value = float(settings.get("font_scale", DEFAULT_SETTINGS["font_scale"]))
    except (TypeError, ValueError):
        value = 0.0
    if value <= 0:
        logger.warning(f"Invalid font_scale {settings.get('font_scale')!r}, using default")
        return DEFAULT_SETTINGS["font_scale"]
    return value


# Keyboard adjustment: name -> (step, min, max), matching the reader's sliders
PREFERENCE_STEPS: Dict[str, Tuple[float, float, float]] = {
    "background_opacity": (0.1, 0.0, 1.0),   # 0-100%
    "font_scale": (0.1, 0.5, 2.0),           # 50-200%
}


def step_preference(settings: Dict[str, Any], name: str, direction: int) -> float:
    """
    Move a display preference one step up or down and store it in `settings`.

    Args:
        settings: Settings dictionary (modified in place)
        name: "background_opacity" or "font_scale"
        direction: +1 or -1

    Returns:
        New value, clamped to the preference's range
    """
    step, low, high = PREFERENCE_STEPS[name]
    current = background_opacity(settings) if name == "background_opacity" else font_scale(settings)
    value = round(min(max(current + direction * step, low), high), 2)
    settings[name] = value
    return value
