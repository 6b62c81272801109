"""Editor workspace: the live aggregate for the current session of one client.

Used by long-lived clients (an editor tab or a popped-out map window) that
keep subscriptions open across session switches. HTTP views build a
short-lived aggregate per request instead.
"""

import logging
from typing import Any

from staffing.services.session_registry import SessionRegistry, active_session_changed
from staffing.services.venue_data import VenueDataAggregate
from staffing.stores.interfaces import EntityStore

logger = logging.getLogger(__name__)


class VenueWorkspace:
    """Owns one VenueDataAggregate and rebuilds it whenever the session switches.

    A workspace opened with an explicit ``session_id`` (a popped-out map
    window) stays on that session regardless of later switches.
    """

    def __init__(self, store: EntityStore, registry: SessionRegistry, session_id: str | None = None) -> None:
        self._store = store
        self._registry = registry
        self._pinned = session_id is not None
        self.aggregate: VenueDataAggregate | None = None
        active_session_changed.connect(self._on_session_changed, sender=registry)
        self._load(registry.resolve_session(session_id))

    @property
    def session_id(self) -> str | None:
        return self.aggregate.session_id if self.aggregate else None

    def _load(self, session_id: str | None) -> None:
        # Old subscriptions go first so a late snapshot cannot land in the new view.
        if self.aggregate is not None:
            self.aggregate.close()
            self.aggregate = None
        if session_id is not None:
            self.aggregate = VenueDataAggregate(self._store, session_id).open()

    def _on_session_changed(self, sender: SessionRegistry, session_id: str, **kwargs: Any) -> None:
        if self._pinned:
            return
        logger.info("Reloading workspace for session %s", session_id)
        self._load(session_id)

    def close(self) -> None:
        active_session_changed.disconnect(self._on_session_changed, sender=self._registry)
        self._load(None)
