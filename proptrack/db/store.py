"""State container holding the current Entity Store snapshot."""

from __future__ import annotations

from collections import Counter
from typing import Any, Callable, Iterable, List, Optional

from ..models.portfolio import RECORD_TYPES, EntityStore, Tenant, collection_field
from ..services.rent import with_monthly_rent
from ..utils.logging import get_logger

LOGGER = get_logger("db.store")

Listener = Callable[[EntityStore], None]


class StateContainer:
    """Single root of truth; every change swaps the whole snapshot.

    Listeners run after each swap with the new snapshot. Persistence is one
    such listener (see ``Repo.attach``).
    """

    def __init__(self, state: Optional[EntityStore] = None) -> None:
        self._state = state if state is not None else EntityStore()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> EntityStore:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def commit(self, next_state: EntityStore) -> EntityStore:
        if next_state is self._state:
            return next_state
        self._state = next_state
        for listener in list(self._listeners):
            listener(next_state)
        return next_state

    def replace(self, collection: str, records: Iterable[Any]) -> EntityStore:
        """Replace one named collection wholesale.

        Raises KeyError for an unknown collection name and a pydantic
        ValidationError for records that do not fit the schema.
        """

        field = collection_field(collection)
        model = RECORD_TYPES[field]
        validated = [r if isinstance(r, model) else model.model_validate(r) for r in records]
        if field == "tenants":
            validated = [with_monthly_rent(t) for t in validated]
            _warn_shared_rooms(validated)
        LOGGER.debug("collection_replaced name=%s records=%d", field, len(validated))
        return self.commit(self._state.with_collection(field, validated))

    def apply(self, mutation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a snapshot mutation and commit its result.

        Mutations returning ``(snapshot, extra)`` have the snapshot committed and
        the whole tuple handed back.
        """

        result = mutation(self._state, *args, **kwargs)
        if isinstance(result, tuple):
            self.commit(result[0])
        else:
            self.commit(result)
        return result


def _warn_shared_rooms(tenants: List[Tenant]) -> None:
    counts = Counter(t.room_id for t in tenants if t.is_active and t.room_id)
    for room_id, count in counts.items():
        if count > 1:
            LOGGER.warning("room_shared room_id=%s active_tenants=%d", room_id, count)
