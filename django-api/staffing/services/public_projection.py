"""Read-only projection of the one session shared with anonymous viewers."""

import logging
from enum import Enum
from typing import Self

from django.core.cache import cache

from staffing.conf import get_setting
from staffing.domain.errors import AccessDeniedError, DomainError, LoadFailedError, NoPublicSessionError
from staffing.domain.models import VenueData
from staffing.services.venue_data import LoadStatus, VenueDataView
from staffing.stores.interfaces import VENUE, EntityStore, StoreAccessError, StoreUnavailableError

logger = logging.getLogger(__name__)

PUBLIC_SESSION_CACHE_KEY = "public:session"


class ProjectionStatus(Enum):
    LOADING = "loading"
    READY = "ready"
    NO_PUBLIC_SESSION = "no_public_session"
    NO_LONGER_PUBLIC = "no_longer_public"
    ACCESS_DENIED = "access_denied"
    LOAD_FAILED = "load_failed"


def find_public_session_id(store: EntityStore) -> str | None:
    """Return the session whose venue document is flagged public, if any.

    The answer is cached; "" in the cache means "no public session".
    """
    cached = cache.get(PUBLIC_SESSION_CACHE_KEY)
    if cached is not None:
        return cached or None

    partitions = sorted({partition for partition, _, _ in store.find_in_group(VENUE, isPublic=True)})
    if len(partitions) > 1:
        logger.warning("Several public sessions found, using %s: %s", partitions[0], partitions)
    session_id = partitions[0] if partitions else None
    cache.set(PUBLIC_SESSION_CACHE_KEY, session_id or "", get_setting("PUBLIC_SESSION_CACHE_TTL"))
    return session_id


class PublicProjectionGate:
    """Finds the public session and follows it read-only.

    If the session stops being public while open, the data is dropped and
    the gate moves to NO_LONGER_PUBLIC.
    """

    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self.session_id: str | None = None
        self.view: VenueDataView | None = None
        self.error: DomainError | None = None
        self._stopped = False

    def open(self) -> Self:
        try:
            self.session_id = find_public_session_id(self._store)
        except StoreAccessError:
            self.error = AccessDeniedError()
            return self
        except StoreUnavailableError:
            self.error = LoadFailedError()
            return self

        if self.session_id is None:
            self.error = NoPublicSessionError()
            return self

        self.view = VenueDataView(self._store, self.session_id)
        self.view.add_listener(self._on_change)
        self.view.open()
        return self

    def _on_change(self, view: VenueDataView) -> None:
        doc = view.venue_document()
        if doc is not None and not doc.get("isPublic", False):
            logger.info("Session %s is no longer public", self.session_id)
            self._stopped = True
            self.error = NoPublicSessionError("Sharing was stopped by an administrator")
            view.close()
            self.view = None
            cache.delete(PUBLIC_SESSION_CACHE_KEY)

    def close(self) -> None:
        if self.view is not None:
            self.view.close()
            self.view = None

    def __enter__(self) -> Self:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def status(self) -> ProjectionStatus:
        if self._stopped:
            return ProjectionStatus.NO_LONGER_PUBLIC
        if isinstance(self.error, NoPublicSessionError):
            return ProjectionStatus.NO_PUBLIC_SESSION
        if isinstance(self.error, AccessDeniedError):
            return ProjectionStatus.ACCESS_DENIED
        if isinstance(self.error, LoadFailedError):
            return ProjectionStatus.LOAD_FAILED
        if self.view is None:
            return ProjectionStatus.LOADING
        return {
            LoadStatus.LOADING: ProjectionStatus.LOADING,
            LoadStatus.READY: ProjectionStatus.READY,
            LoadStatus.ACCESS_DENIED: ProjectionStatus.ACCESS_DENIED,
            LoadStatus.LOAD_FAILED: ProjectionStatus.LOAD_FAILED,
        }[self.view.status]

    @property
    def data(self) -> VenueData | None:
        """Viewer data; None unless the projection is ready."""
        if self.status is not ProjectionStatus.READY or self.view is None:
            return None
        return self.view.data
