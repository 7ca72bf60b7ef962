# ABOUTME: User preferences stored as a small JSON file beside the library database.
# ABOUTME: Holds search defaults and the download server; invalid values fall back to defaults.

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from maktaba.core.search import InputScript, MatchMode
from maktaba.core.sects import Sect
from maktaba.remote.catalog import DEFAULT_SERVER_URL

logger = logging.getLogger(__name__)

DEFAULT_PREFS_PATH = Path.home() / ".maktaba" / "preferences.json"


@dataclass
class Preferences:
    search_mode: MatchMode = MatchMode.ROOT
    input_script: InputScript = InputScript.NATIVE
    sect_filter: Sect = Sect.ALL
    server_url: str = DEFAULT_SERVER_URL

    def to_dict(self) -> dict[str, str]:
        return {key: str(getattr(value, "value", value)) for key, value in asdict(self).items()}


_ENUM_FIELDS = {
    "search_mode": MatchMode,
    "input_script": InputScript,
    "sect_filter": Sect,
}

PREFERENCE_KEYS = tuple(f.name for f in fields(Preferences))


def coerce_preference(key: str, value: object) -> MatchMode | InputScript | Sect | str:
    """Convert a raw value into the typed value for a preference key.

    Raises:
        KeyError: If the key is not a known preference.
        ValueError: If the value is not valid for the key.
    """
    if key not in PREFERENCE_KEYS:
        raise KeyError(key)
    enum_type = _ENUM_FIELDS.get(key)
    if enum_type is not None:
        return enum_type(value)
    if not isinstance(value, str) or not value.startswith(("http://", "https://")):
        raise ValueError(f"{key} must be an http(s) URL")
    return value.rstrip("/")


def load_preferences(path: Path | None = None) -> Preferences:
    """Read preferences, keeping defaults for anything missing or invalid."""
    path = path or DEFAULT_PREFS_PATH
    prefs = Preferences()
    if not path.exists():
        return prefs

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable preferences file %s: %s", path, exc)
        return prefs
    if not isinstance(data, dict):
        logger.warning("Ignoring preferences file %s: expected a JSON object", path)
        return prefs

    for key, raw in data.items():
        try:
            setattr(prefs, key, coerce_preference(key, raw))
        except KeyError:
            logger.warning("Ignoring unknown preference %r", key)
        except ValueError:
            logger.warning("Ignoring invalid value %r for preference %r", raw, key)
    return prefs


def save_preferences(prefs: Preferences, path: Path | None = None) -> Path:
    """Write preferences as JSON, creating the parent directory if needed."""
    path = path or DEFAULT_PREFS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(prefs.to_dict(), indent=2) + "\n", encoding="utf-8")
    return path
