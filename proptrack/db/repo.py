"""Repository that persists the Entity Store as a single JSON blob."""

from __future__ import annotations

import os
from typing import Callable, Optional

from ..models.portfolio import EntityStore
from ..utils.io import load_json, resolve_path, save_json
from ..utils.logging import get_logger
from .mappers import map_state_blob
from .seed import initial_state
from .store import StateContainer

LOGGER = get_logger("db.repo")

STATE_FILE = os.getenv("PROPTRACK_STATE_FILE", "proptrack_data.json")


class Repo:
    def __init__(self, path: Optional[str] = None) -> None:
        self.path = resolve_path(path or STATE_FILE)

    def load(self) -> EntityStore:
        """Load the saved snapshot.

        A missing file yields the seed state; an unreadable file yields an empty
        store. Missing or malformed collections inside a readable file become
        empty lists.
        """

        try:
            raw = load_json(self.path)
        except (OSError, ValueError) as exc:
            LOGGER.warning("state_unreadable path=%s error=%s; starting empty", self.path, exc)
            return EntityStore()
        if raw is None:
            LOGGER.info("No saved state at %s; using seed data", self.path)
            return initial_state()
        state = map_state_blob(raw)
        LOGGER.info(
            "state_loaded path=%s houses=%d tenants=%d payments=%d",
            self.path,
            len(state.houses),
            len(state.tenants),
            len(state.payments),
        )
        return state

    def save(self, state: EntityStore) -> str:
        return save_json(self.path, state.to_blob())

    def open_container(self) -> StateContainer:
        """Container over the saved snapshot that writes back on every change."""

        container = StateContainer(self.load())
        self.attach(container)
        return container

    def attach(self, container: StateContainer) -> Callable[[], None]:
        return container.subscribe(self.save)


_repo_singleton: Repo | None = None


def get_repository() -> Repo:
    global _repo_singleton
    if _repo_singleton is None:
        _repo_singleton = Repo()
    return _repo_singleton
