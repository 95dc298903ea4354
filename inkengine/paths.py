"""
inkengine/paths.py -- Default locations for project snapshots.

Uses platformdirs for the per-user data directory, so exported snapshots
live in the platform's usual place when no explicit path is given.
"""

from __future__ import annotations

import os

from platformdirs import user_data_dir

_APP_NAME = "InkAlchemy"
_APP_AUTHOR = "InkAlchemy"


def get_user_data_dir() -> str:
    """Return the platform-appropriate user data directory."""
    path = user_data_dir(_APP_NAME, _APP_AUTHOR)
    os.makedirs(path, exist_ok=True)
    return path


def get_projects_dir() -> str:
    """Return the directory holding project snapshots (created on demand)."""
    path = os.path.join(get_user_data_dir(), "projects")
    os.makedirs(path, exist_ok=True)
    return path


def default_project_path(name: str) -> str:
    """Return the snapshot path for project *name* (``<projects>/<name>.json``)."""
    if not name.endswith(".json"):
        name = f"{name}.json"
    return os.path.join(get_projects_dir(), name)
