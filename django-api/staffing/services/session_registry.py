"""Session registry - which tenant this client works on, and cross-session operations.

The active session id is a client-local value: read when resolved, written
on change. Switching sends ``active_session_changed`` so every workspace
bound to this registry rebuilds its subscriptions from scratch.
"""

import logging
from urllib.parse import urlencode

from django.core.cache import cache
from django.dispatch import Signal

from staffing.domain.errors import SessionNotFoundError, ValidationError
from staffing.domain.models import VENUE_DOC_ID, Session, VenueInfo
from staffing.services.broadcast import BroadcastChannel, LastValueInbox
from staffing.services.public_projection import PUBLIC_SESSION_CACHE_KEY, find_public_session_id
from staffing.stores.client_state import ACTIVE_SESSION_KEY, ClientStateStore
from staffing.stores.interfaces import (
    MAPS,
    MARKERS,
    ROLES,
    ROOT_PARTITION,
    SCHEDULES,
    SESSIONS,
    STAFF,
    VENUE,
    EntityStore,
    StoreAccessError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

# Sent by SessionRegistry.set_active; kwargs: session_id.
active_session_changed = Signal()

IMPORT_COLLECTIONS = (VENUE, STAFF, ROLES, SCHEDULES, MAPS, MARKERS)
NO_PUBLIC_SESSION = "none"
SESSION_CHANNEL = "staffing-session"


def popout_map_url(base_url: str, session_id: str) -> str:
    """Link for the map opened in a separate window, pinned to ``session_id``."""
    return f"{base_url}?{urlencode({'session': session_id})}"


class SessionRegistry:
    """Session list, active-session selection and cross-session copy for one owner."""

    def __init__(
        self,
        store: EntityStore,
        client_state: ClientStateStore,
        owner_id: str,
        channel: BroadcastChannel | None = None,
    ) -> None:
        self._store = store
        self._client_state = client_state
        self.owner_id = owner_id
        self._channel = channel or BroadcastChannel.named(SESSION_CHANNEL)
        self.inbox = LastValueInbox()
        self._remove_listener = self._channel.add_listener(self.inbox)

    def close(self) -> None:
        self._remove_listener()

    def list_sessions(self, owner_id: str | None = None) -> list[Session]:
        """Sessions of the owner, ordered by id."""
        owner = owner_id or self.owner_id
        sessions = [
            Session.from_document(doc_id, doc)
            for doc_id, doc in self._store.snapshot(ROOT_PARTITION, SESSIONS).items()
            if doc.get("ownerId") == owner
        ]
        return sorted(sessions, key=lambda s: s.id)

    def get_session(self, session_id: str) -> Session:
        """Return an owned session.

        Raises:
            SessionNotFoundError: If the session does not exist or belongs to another owner.
        """
        doc = self._store.get(ROOT_PARTITION, SESSIONS, session_id)
        if doc is None or doc.get("ownerId") != self.owner_id:
            raise SessionNotFoundError(session_id)
        return Session.from_document(session_id, doc)

    def active_session_id(self) -> str | None:
        """Resolve the persisted active session, falling back to the first one.

        Never raises; None means there is nothing to show (yet).
        """
        try:
            sessions = self.list_sessions()
        except (StoreAccessError, StoreUnavailableError) as exc:
            logger.warning("Could not list sessions for %s: %s", self.owner_id, exc)
            return None

        persisted = self._client_state.get(ACTIVE_SESSION_KEY)
        if persisted and any(s.id == persisted for s in sessions):
            return persisted

        if sessions:
            fallback = sessions[0].id
            self._client_state.set(ACTIVE_SESSION_KEY, fallback)
            if persisted:
                logger.info("Active session %s is gone, falling back to %s", persisted, fallback)
            return fallback

        self._client_state.remove(ACTIVE_SESSION_KEY)
        return None

    def resolve_session(self, explicit_id: str | None = None) -> str | None:
        """Prefer an explicit id (e.g. a pop-out window's query parameter) over the persisted one."""
        if explicit_id:
            self.get_session(explicit_id)
            return explicit_id
        return self.active_session_id()

    def set_active(self, session_id: str) -> None:
        """Persist the choice and force every dependent workspace to reload."""
        self.get_session(session_id)
        self._client_state.set(ACTIVE_SESSION_KEY, session_id)
        self._channel.post(ACTIVE_SESSION_KEY, session_id, sender=self.inbox)
        logger.info("Owner %s switched to session %s", self.owner_id, session_id)
        active_session_changed.send(sender=self, session_id=session_id)

    def rename(self, session_id: str, new_name: str) -> Session:
        name = (new_name or "").strip()
        if not name:
            raise ValidationError("Session name cannot be empty")
        self.get_session(session_id)
        self._store.patch(ROOT_PARTITION, SESSIONS, session_id, {"name": name})
        return Session(id=session_id, name=name, owner_id=self.owner_id)

    def import_from(self, source_id: str, target_id: str | None = None) -> None:
        """Replace the target session's data with a copy of the source's.

        Target documents are deleted and source documents copied in one
        atomic batch. The target keeps its own public flag.
        """
        target_id = target_id or self.active_session_id()
        if not target_id:
            raise ValidationError("No target session selected")
        if source_id == target_id:
            raise ValidationError("Cannot import a session into itself")
        self.get_session(source_id)
        self.get_session(target_id)

        target_venue = VenueInfo.from_document(self._store.get(target_id, VENUE, VENUE_DOC_ID))

        batch = self._store.batch()
        for collection in IMPORT_COLLECTIONS:
            for doc_id in self._store.snapshot(target_id, collection):
                batch.delete(target_id, collection, doc_id)
            for doc_id, doc in self._store.snapshot(source_id, collection).items():
                if collection == VENUE:
                    doc = {**doc, "isPublic": target_venue.is_public}
                batch.set(target_id, collection, doc_id, doc)
        if target_venue.is_public and self._store.get(source_id, VENUE, VENUE_DOC_ID) is None:
            batch.set(target_id, VENUE, VENUE_DOC_ID, VenueInfo(is_public=True).to_document())
        writes = len(batch)
        batch.commit()
        cache.delete(PUBLIC_SESSION_CACHE_KEY)
        logger.info("Imported session %s into %s (%d writes)", source_id, target_id, writes)

    def public_session_id(self) -> str | None:
        return find_public_session_id(self._store)

    def set_public(self, session_id: str) -> None:
        """Make one session public, or none with ``"none"``.

        Clearing the previous holder and flagging the new one happen in the
        same batch, so two sessions are never public at once.
        """
        if session_id != NO_PUBLIC_SESSION:
            self.get_session(session_id)

        batch = self._store.batch()
        for partition, doc_id, _ in self._store.find_in_group(VENUE, isPublic=True):
            if partition != session_id:
                batch.patch(partition, VENUE, doc_id, {"isPublic": False})
        if session_id != NO_PUBLIC_SESSION:
            if self._store.get(session_id, VENUE, VENUE_DOC_ID) is None:
                batch.set(session_id, VENUE, VENUE_DOC_ID, VenueInfo(is_public=True).to_document())
            else:
                batch.patch(session_id, VENUE, VENUE_DOC_ID, {"isPublic": True})
        batch.commit()
        cache.delete(PUBLIC_SESSION_CACHE_KEY)
        logger.info("Public session set to %s", session_id)
