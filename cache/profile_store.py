"""
User profile store — a single JSON file the runner owns.

Lets `main.py` reuse the last profile when no profile flags are given.
The API key is never written here; it comes from the environment.

Store file: .cache/user_profile.json
Content:    { "saved_at": "2026-02-27T10:30:00", "profile": {...} }
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from state.models import UserProfile

logger = logging.getLogger(__name__)

_STORE_DIR = Path(".cache")
_STORE_FILE = "user_profile.json"


def _path(store_dir: Path | None = None) -> Path:
    d = store_dir or _STORE_DIR
    d.mkdir(parents=True, exist_ok=True)
    return d / _STORE_FILE


def save(profile: UserProfile, store_dir: Path | None = None) -> None:
    data = {
        "saved_at": datetime.now().isoformat(timespec="seconds"),
        "profile": profile.model_dump(mode="json"),
    }
    with open(_path(store_dir), "w") as f:
        json.dump(data, f, indent=2)


def load(store_dir: Path | None = None) -> tuple[UserProfile, str] | None:
    """
    Load the last saved profile.

    Returns:
        (profile, saved_at_str)  if a readable profile exists
        None                     if no file, or the file is unreadable/outdated
    """
    p = _path(store_dir)
    if not p.exists():
        return None
    try:
        with open(p) as f:
            data = json.load(f)
        return UserProfile.model_validate(data["profile"]), data["saved_at"]
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable profile store {p}: {e}")
        return None


def clear(store_dir: Path | None = None) -> None:
    """Profile reset."""
    _path(store_dir).unlink(missing_ok=True)
