"""Version reporting for rkedit."""

from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import Optional

DISTRIBUTION = "rkedit"


def get_version() -> str:
    """Installed distribution version, or a placeholder for source checkouts."""
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return "0+unknown"


def _git_commit() -> Optional[str]:
    # Only meaningful when running from a git checkout
    here = Path(__file__).resolve().parent
    try:
        out = subprocess.check_output(
            ["git", "rev-parse", "--short=7", "HEAD"],
            cwd=str(here),
            stderr=subprocess.DEVNULL,
        )
    except (subprocess.CalledProcessError, FileNotFoundError, OSError):
        return None
    return out.decode().strip() or None


def get_version_string() -> str:
    """Version for ``--version``: the release plus the commit when known."""
    commit = _git_commit()
    version = get_version()
    return f"{version} ({commit})" if commit else version
