import json
from dataclasses import dataclass
from pathlib import Path
from ..data.paths import SETTINGS_PATH

DEFAULT_COUNTDOWN = 10
PLATFORMS = ("auto", "ubuntu", "raspberry-pi", "minimal", "windows")

DEFAULTS = {
    "assume_yes": False,
    "auto_reboot": False,
    "countdown": DEFAULT_COUNTDOWN,
    "platform": "auto",
    "report": "json",
    "out": None,
    "log_file": None,
}

def validate_countdown(value) -> tuple[int, str | None]:
    """
    Return ``(seconds, warning)``. Anything that is not a plain non-negative
    integer falls back to the default and yields a warning.
    """
    s = str(value).strip() if value is not None else ""
    if s.isascii() and s.isdigit():
        return int(s), None
    return DEFAULT_COUNTDOWN, f"Invalid countdown '{value}'. Falling back to {DEFAULT_COUNTDOWN} seconds."


@dataclass(frozen=True)
class RunConfiguration:
    assume_yes: bool = False
    auto_reboot: bool = False
    countdown_seconds: int = DEFAULT_COUNTDOWN
    force_release_upgrade: bool = False
    platform: str = "auto"
    dry_run: bool = False
    debug: bool = False
    report: str | None = None
    out: str | None = None
    log_file: str | None = None

    def __post_init__(self):
        if self.countdown_seconds < 0:
            raise ValueError("countdown_seconds must be >= 0")
        if self.platform not in PLATFORMS:
            raise ValueError(f"unknown platform: {self.platform}")

    @property
    def skip_reboot_prompt(self) -> bool:
        return self.auto_reboot or self.assume_yes


class ConfigStore:
    """Read-only view of the settings file; missing or broken files yield defaults."""

    def __init__(self, path: Path = SETTINGS_PATH):
        self.path = path
        self.warnings = []
        self.settings = self._load_json(path) or {}

    def _load_json(self, path):
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                self.warnings.append(f"Could not read settings {path}: {e}")
                return None
            if not isinstance(data, dict):
                self.warnings.append(f"Ignoring settings {path}: not a JSON object")
                return None
            return data
        return None

    def _ignore(self, key, value):
        self.warnings.append(f"Ignoring settings value {key}={value!r} in {self.path}")

    def get_defaults(self):
        raw = self.settings.get("defaults")
        if raw is not None and not isinstance(raw, dict):
            self._ignore("defaults", raw)
            raw = None
        d = dict(raw or {})
        for k, v in DEFAULTS.items():
            d.setdefault(k, v)
        for k in ("assume_yes", "auto_reboot"):
            if not isinstance(d[k], bool):
                self._ignore(k, d[k])
                d[k] = False
        for k in ("out", "log_file"):
            if d[k] is not None and not (isinstance(d[k], str) and d[k].strip()):
                self._ignore(k, d[k])
                d[k] = None
        if d["platform"] not in PLATFORMS:
            d["platform"] = "auto"
        if d["report"] not in ("json", "txt"):
            d["report"] = "json"
        return d
