"""IO helpers for reading and writing the persisted state blob."""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Optional

from .logging import get_logger

LOGGER = get_logger("utils.io")

DATA_DIR = os.getenv("DATA_DIR", os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "data"))


def resolve_path(name: str) -> str:
    return name if os.path.isabs(name) else os.path.join(DATA_DIR, name)


def load_json(name: str) -> Optional[Any]:
    """Load a JSON document by filename from the data directory.

    Returns None when the file does not exist. Decoding errors propagate so the
    caller decides how to degrade.
    """

    path = resolve_path(name)
    if not os.path.exists(path):
        return None
    LOGGER.debug("loading_json path=%s", path)
    with open(path, "r", encoding="utf-8") as infile:
        return json.load(infile)


def save_json(name: str, payload: Any) -> str:
    """Write a JSON document next to its final path, then move it into place."""

    path = resolve_path(name)
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".proptrack-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as outfile:
            json.dump(payload, outfile, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    LOGGER.debug("saved_json path=%s", path)
    return path
