"""Venue data service - the single source of truth for one session.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or raise domain errors

``VenueDataView`` assembles the composed view from per-collection
snapshots and is shared with the public viewer. ``VenueDataAggregate``
adds every mutation; all writes go through it so cascades are applied
the same way everywhere.
"""

import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from functools import partial
from typing import Any, Self

from staffing.conf import get_setting
from staffing.domain.errors import (
    AccessDeniedError,
    DomainError,
    LoadFailedError,
    RoleNotFoundError,
    ScheduleNotFoundError,
    StaffNotFoundError,
    TemplateNotFoundError,
    ValidationError,
)
from staffing.domain.models import (
    VENUE_DOC_ID,
    DerivedMarkerRef,
    MapInfo,
    PersistedMarker,
    Position,
    Role,
    ScheduleItem,
    ScheduleTemplate,
    StaffMember,
    StaffRole,
    Task,
    TimeSlotInfo,
    VenueData,
    VenueInfo,
    parse_marker_ref,
    promoted_marker_id,
)
from staffing.domain.reconciliation import SlotView, reconcile_slot
from staffing.domain.value_objects import DAYS, ImageReference, Point, Slot
from staffing.services.seed import seed_documents
from staffing.stores.interfaces import (
    MAPS,
    MARKERS,
    POSITIONS,
    ROLES,
    SCHEDULE_TEMPLATES,
    SCHEDULES,
    SESSION_COLLECTIONS,
    STAFF,
    TIME_SLOT_INFO,
    VENUE,
    EntityStore,
    Snapshot,
    StoreAccessError,
    Subscription,
)

logger = logging.getLogger(__name__)

REQUIRED_COLLECTIONS = (STAFF,)


class LoadStatus(Enum):
    LOADING = "loading"
    READY = "ready"
    ACCESS_DENIED = "access_denied"
    LOAD_FAILED = "load_failed"


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _slot(day: int | str, time: str) -> Slot:
    try:
        return Slot.from_values(day, time)
    except ValueError as exc:
        raise ValidationError(str(exc)) from None


def _day(day: int | str) -> int:
    try:
        value = int(day)
    except (TypeError, ValueError):
        raise ValidationError("Day must be an integer") from None
    if value not in DAYS:
        raise ValidationError(f"Day must be one of {DAYS}")
    return value


def _image(value: str, max_bytes: int) -> str:
    try:
        return str(ImageReference(value, max_bytes))
    except ValueError as exc:
        raise ValidationError(str(exc)) from None


def _required_text(value: str | None, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} cannot be empty")
    return text


def _tasks(tasks: Iterable[Task | dict[str, Any] | str]) -> list[Task]:
    result = []
    for task in tasks:
        if isinstance(task, Task):
            result.append(task)
        elif isinstance(task, str):
            result.append(Task(event=task))
        else:
            result.append(Task.from_document(task))
    return [t for t in result if t.event.strip()]


def _merge_tasks(existing: Sequence[Task], extra: Iterable[Task]) -> tuple[Task, ...]:
    """Append tasks whose event text is not present yet, keeping order."""
    merged = list(existing)
    seen = {t.event for t in merged}
    for task in extra:
        if task.event not in seen:
            merged.append(task)
            seen.add(task.event)
    return tuple(merged)


class VenueDataView:
    """Read-only, subscription-fed view of one session's data."""

    def __init__(self, store: EntityStore, session_id: str) -> None:
        self._store = store
        self.session_id = session_id
        self._snapshots: dict[str, Snapshot] = {}
        self._subscriptions: list[Subscription] = []
        self._listeners: list[Callable[["VenueDataView"], None]] = []
        self._data: VenueData | None = None
        self.error: DomainError | None = None
        self.closed = False

    def open(self) -> Self:
        for collection in SESSION_COLLECTIONS:
            if self.closed:
                break
            subscription = self._store.subscribe(
                self.session_id,
                collection,
                partial(self._on_snapshot, collection),
                partial(self._on_error, collection),
            )
            # A listener may close the view from inside the first delivery.
            if self.closed:
                subscription.close()
                break
            self._subscriptions.append(subscription)
        return self

    def close(self) -> None:
        """Tear down every subscription; later deliveries are ignored."""
        self.closed = True
        for subscription in self._subscriptions:
            subscription.close()
        self._subscriptions.clear()

    def __enter__(self) -> Self:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add_listener(self, listener: Callable[["VenueDataView"], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _on_snapshot(self, collection: str, snapshot: Snapshot) -> None:
        if self.closed:
            return
        self._snapshots[collection] = snapshot
        self._data = None
        self._notify()

    def _on_error(self, collection: str, exc: Exception) -> None:
        if self.closed:
            return
        logger.warning("Subscription to %s/%s failed: %s", self.session_id, collection, exc)
        if isinstance(exc, StoreAccessError):
            self.error = AccessDeniedError()
        else:
            self.error = LoadFailedError()
        self._notify()

    @property
    def status(self) -> LoadStatus:
        if isinstance(self.error, AccessDeniedError):
            return LoadStatus.ACCESS_DENIED
        if self.error is not None:
            return LoadStatus.LOAD_FAILED
        if all(c in self._snapshots for c in REQUIRED_COLLECTIONS):
            return LoadStatus.READY
        return LoadStatus.LOADING

    @property
    def is_ready(self) -> bool:
        return self.status is LoadStatus.READY

    def venue_document(self) -> dict[str, Any] | None:
        """Raw venue document as last delivered, None if absent or not yet loaded."""
        return self._snapshots.get(VENUE, {}).get(VENUE_DOC_ID)

    @property
    def data(self) -> VenueData:
        if self._data is None:
            self._data = self._compose()
        return self._data

    def _compose(self) -> VenueData:
        def docs(name: str):
            return self._snapshots.get(name, {}).items()

        markers = []
        for doc_id, doc in docs(MARKERS):
            if not doc.get("staffIds"):
                logger.warning("Skipping marker %s with no staff", doc_id)
                continue
            markers.append(PersistedMarker.from_document(doc_id, doc))

        return VenueData(
            staff=tuple(sorted((StaffMember.from_document(i, d) for i, d in docs(STAFF)), key=lambda s: s.id)),
            roles=tuple(
                sorted(
                    (Role.from_document(i, d) for i, d in docs(ROLES)),
                    key=lambda r: (r.day, r.order if r.order is not None else 0, r.name),
                )
            ),
            schedule=tuple(
                sorted(
                    (ScheduleItem.from_document(i, d) for i, d in docs(SCHEDULES)),
                    key=lambda s: (s.day, s.time, s.id),
                )
            ),
            markers=tuple(sorted(markers, key=lambda m: m.id)),
            maps=tuple(MapInfo.from_document(i, d) for i, d in docs(MAPS)),
            schedule_templates=tuple(
                sorted(
                    (ScheduleTemplate.from_document(i, d) for i, d in docs(SCHEDULE_TEMPLATES)),
                    key=lambda t: t.name,
                )
            ),
            positions=tuple(
                sorted((Position.from_document(i, d) for i, d in docs(POSITIONS)), key=lambda p: p.name)
            ),
            time_slot_infos=tuple(TimeSlotInfo.from_document(i, d) for i, d in docs(TIME_SLOT_INFO)),
            venue=VenueInfo.from_document(self.venue_document()),
        )

    def slot_view(self, day: int | str, time: str) -> SlotView:
        return reconcile_slot(self.data, _slot(day, time), get_setting("DEFAULT_MAP_IMAGE"))


class VenueDataAggregate(VenueDataView):
    """Editor-side aggregate: the view plus every mutation operation.

    Mutations read current documents from the store rather than the cached
    snapshots so cascades never act on a stale copy.
    """

    def _docs(self, collection: str) -> Snapshot:
        return self._store.snapshot(self.session_id, collection)

    def _get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        return self._store.get(self.session_id, collection, doc_id)

    # Staff

    def add_staff(self, name: str, avatar: str) -> StaffMember:
        member = StaffMember(
            id=_new_id("staff"),
            name=_required_text(name, "Staff name"),
            avatar=_image(avatar, get_setting("MAX_AVATAR_BYTES")),
        )
        self._store.put(self.session_id, STAFF, member.id, member.to_document())
        return member

    def add_staff_batch(self, members: Iterable[tuple[str, str]]) -> list[StaffMember]:
        created = [
            StaffMember(
                id=_new_id("staff"),
                name=_required_text(name, "Staff name"),
                avatar=_image(avatar, get_setting("MAX_AVATAR_BYTES")),
            )
            for name, avatar in members
        ]
        batch = self._store.batch()
        for member in created:
            batch.set(self.session_id, STAFF, member.id, member.to_document())
        batch.commit()
        return created

    def update_staff(self, staff_id: str, **patch: Any) -> StaffMember:
        """Apply a partial update.

        Raises:
            StaffNotFoundError: If the staff member does not exist.
            ValidationError: For unknown fields or invalid values.
        """
        doc = self._get(STAFF, staff_id)
        if doc is None:
            raise StaffNotFoundError(staff_id)

        changes: dict[str, Any] = {}
        for field, value in patch.items():
            if field == "name":
                changes["name"] = _required_text(value, "Staff name")
            elif field == "avatar":
                changes["avatar"] = _image(value, get_setting("MAX_AVATAR_BYTES"))
            elif field == "role":
                try:
                    changes["role"] = StaffRole(value).value
                except ValueError:
                    raise ValidationError(f"Unknown staff role: {value}") from None
            elif field == "position_id":
                changes["positionId"] = value
            else:
                raise ValidationError(f"Unknown staff field: {field}")

        if changes:
            self._store.patch(self.session_id, STAFF, staff_id, changes)
        return StaffMember.from_document(staff_id, {**doc, **changes})

    def delete_staff(self, staff_id: str) -> None:
        """Delete a staff member and strip them from every marker and schedule row.

        Markers left without staff are deleted; schedule rows are kept.
        """
        if self._get(STAFF, staff_id) is None:
            logger.warning("delete_staff: %s not found in %s", staff_id, self.session_id)
            return

        batch = self._store.batch()
        batch.delete(self.session_id, STAFF, staff_id)
        for doc_id, doc in self._docs(SCHEDULES).items():
            staff_ids = doc.get("staffIds") or []
            if staff_id in staff_ids:
                batch.patch(
                    self.session_id, SCHEDULES, doc_id, {"staffIds": [i for i in staff_ids if i != staff_id]}
                )
        for doc_id, doc in self._docs(MARKERS).items():
            staff_ids = doc.get("staffIds") or []
            if staff_id not in staff_ids:
                continue
            remaining = [i for i in staff_ids if i != staff_id]
            if remaining:
                batch.patch(self.session_id, MARKERS, doc_id, {"staffIds": remaining})
            else:
                batch.delete(self.session_id, MARKERS, doc_id)
        batch.commit()

    # Markers

    def add_marker(self, staff_id: str, day: int, time: str, x: float, y: float) -> PersistedMarker:
        """Place a staff member on a slot's map. Always creates a new marker."""
        slot = _slot(day, time)
        if self._get(STAFF, staff_id) is None:
            raise StaffNotFoundError(staff_id)
        point = Point(x, y)
        marker = PersistedMarker(
            id=_new_id("marker"), staff_ids=(staff_id,), day=slot.day, time=slot.time, x=point.x, y=point.y
        )
        self._store.put(self.session_id, MARKERS, marker.id, marker.to_document())
        return marker

    def update_marker_position(
        self,
        marker_id: str,
        x: float,
        y: float,
        staff_ids: Sequence[str] | None = None,
        day: int | None = None,
        time: str | None = None,
    ) -> PersistedMarker | None:
        """Move a marker, persisting it first if it was derived.

        Returns the stored marker, or None if a persisted id no longer exists.
        """
        point = Point(x, y)
        ref = parse_marker_ref(marker_id)

        if isinstance(ref, DerivedMarkerRef):
            if not staff_ids or day is None or time is None:
                raise ValidationError("Staff, day and time are required to place a default marker")
            slot = _slot(day, time)
            marker = PersistedMarker(
                id=promoted_marker_id(staff_ids[0], slot),
                staff_ids=tuple(staff_ids),
                day=slot.day,
                time=slot.time,
                x=point.x,
                y=point.y,
            )
            self._store.put(self.session_id, MARKERS, marker.id, marker.to_document())
            return marker

        doc = self._get(MARKERS, marker_id)
        if doc is None:
            logger.warning("update_marker_position: %s not found in %s", marker_id, self.session_id)
            return None
        self._store.patch(self.session_id, MARKERS, marker_id, {"x": point.x, "y": point.y})
        return PersistedMarker.from_document(marker_id, {**doc, "x": point.x, "y": point.y})

    def delete_marker(self, marker_id: str) -> None:
        if isinstance(parse_marker_ref(marker_id), DerivedMarkerRef):
            return
        self._store.delete(self.session_id, MARKERS, marker_id)

    # Schedule

    def add_schedule(
        self,
        day: int,
        time: str,
        event: str,
        location: str = "",
        staff_ids: Sequence[str] = (),
        role_name: str | None = None,
    ) -> ScheduleItem:
        slot = _slot(day, time)
        item = ScheduleItem(
            id=_new_id("sch"),
            day=slot.day,
            time=slot.time,
            event=_required_text(event, "Event"),
            location=location or "",
            staff_ids=tuple(staff_ids),
            role_name=role_name,
        )
        self._store.put(self.session_id, SCHEDULES, item.id, item.to_document())
        return item

    def update_schedule(self, schedule_id: str, **patch: Any) -> ScheduleItem:
        """Apply a partial update.

        Raises:
            ScheduleNotFoundError: If the schedule item does not exist.
        """
        doc = self._get(SCHEDULES, schedule_id)
        if doc is None:
            raise ScheduleNotFoundError(schedule_id)

        current = ScheduleItem.from_document(schedule_id, doc)
        day = patch.pop("day", current.day)
        time = patch.pop("time", current.time)
        slot = _slot(day, time)
        changes: dict[str, Any] = {"day": slot.day, "time": slot.time}
        for field, value in patch.items():
            if field == "event":
                changes["event"] = _required_text(value, "Event")
            elif field == "location":
                changes["location"] = value or ""
            elif field == "staff_ids":
                changes["staffIds"] = list(value or ())
            elif field == "role_name":
                changes["roleName"] = value
            elif field == "is_completed":
                changes["isCompleted"] = bool(value)
            else:
                raise ValidationError(f"Unknown schedule field: {field}")

        self._store.patch(self.session_id, SCHEDULES, schedule_id, changes)
        return ScheduleItem.from_document(schedule_id, {**doc, **changes})

    def delete_schedule(self, schedule_id: str) -> None:
        self._store.delete(self.session_id, SCHEDULES, schedule_id)

    def delete_schedules_batch(self, schedule_ids: Iterable[str]) -> None:
        batch = self._store.batch()
        for schedule_id in schedule_ids:
            batch.delete(self.session_id, SCHEDULES, schedule_id)
        batch.commit()

    def delete_all_schedules(self) -> None:
        self.delete_schedules_batch(self._docs(SCHEDULES))

    def paste_schedules(self, day: int, time: str, clipboard: Iterable[ScheduleItem]) -> list[ScheduleItem]:
        """Copy clipboard rows into a slot under new ids."""
        slot = _slot(day, time)
        pasted = [
            ScheduleItem(
                id=_new_id("sch"),
                day=slot.day,
                time=slot.time,
                event=item.event,
                location=item.location,
                staff_ids=item.staff_ids,
                role_name=item.role_name,
            )
            for item in clipboard
        ]
        batch = self._store.batch()
        for item in pasted:
            batch.set(self.session_id, SCHEDULES, item.id, item.to_document())
        batch.commit()
        return pasted

    def toggle_schedule_completion(self, schedule_id: str) -> bool:
        """Flip ``is_completed`` and return the new value."""
        doc = self._get(SCHEDULES, schedule_id)
        if doc is None:
            raise ScheduleNotFoundError(schedule_id)
        completed = not bool(doc.get("isCompleted", False))
        self._store.patch(self.session_id, SCHEDULES, schedule_id, {"isCompleted": completed})
        return completed

    def update_schedule_status(self, schedule_ids: Iterable[str], is_completed: bool) -> None:
        """Set the same completion flag on several rows in one batch."""
        existing = self._docs(SCHEDULES)
        batch = self._store.batch()
        for schedule_id in schedule_ids:
            if schedule_id not in existing:
                logger.warning("update_schedule_status: %s not found", schedule_id)
                continue
            batch.patch(self.session_id, SCHEDULES, schedule_id, {"isCompleted": bool(is_completed)})
        batch.commit()

    # Time slots

    def copy_time_slot_data(self, source: Slot, target: Slot) -> None:
        """Overwrite the target slot with the source slot's schedule, markers and map.

        One batch: the target's previous rows are deleted and the copies
        written together, so a failure leaves the target untouched.
        """
        if source == target:
            raise ValidationError("Source and target time slots are the same")

        def in_slot(doc: dict[str, Any], slot: Slot) -> bool:
            return doc.get("day") == slot.day and doc.get("time") == slot.time

        batch = self._store.batch()
        for collection in (SCHEDULES, MARKERS):
            docs = self._docs(collection)
            for doc_id, doc in docs.items():
                if in_slot(doc, target):
                    batch.delete(self.session_id, collection, doc_id)
            prefix = "sch" if collection == SCHEDULES else "marker"
            for doc_id, doc in sorted(docs.items()):
                if in_slot(doc, source):
                    new_id = _new_id(prefix)
                    batch.set(
                        self.session_id,
                        collection,
                        new_id,
                        {**doc, "id": new_id, "day": target.day, "time": target.time},
                    )

        for collection in (MAPS, TIME_SLOT_INFO):
            batch.delete(self.session_id, collection, target.map_id)
            source_doc = self._get(collection, source.map_id)
            if source_doc is not None:
                batch.set(
                    self.session_id,
                    collection,
                    target.map_id,
                    {**source_doc, "day": target.day, "time": target.time},
                )

        batch.commit()
        logger.info("Copied %s to %s in session %s", source, target, self.session_id)

    def update_map_image(self, day: int, time: str, map_image_url: str) -> MapInfo:
        slot = _slot(day, time)
        info = MapInfo(
            id=slot.map_id,
            day=slot.day,
            time=slot.time,
            map_image_url=_image(map_image_url, get_setting("MAX_MAP_IMAGE_BYTES")),
        )
        self._store.put(self.session_id, MAPS, info.id, info.to_document())
        return info

    def update_time_slot_info(self, day: int, time: str, title: str) -> TimeSlotInfo:
        slot = _slot(day, time)
        info = TimeSlotInfo(id=slot.map_id, day=slot.day, time=slot.time, title=title.strip())
        self._store.put(self.session_id, TIME_SLOT_INFO, info.id, info.to_document())
        return info

    def update_notification(self, text: str) -> None:
        if self._get(VENUE, VENUE_DOC_ID) is None:
            self._store.put(self.session_id, VENUE, VENUE_DOC_ID, VenueInfo(notification=text).to_document())
        else:
            self._store.patch(self.session_id, VENUE, VENUE_DOC_ID, {"notification": text})

    # Roles

    def _role(self, role_id: str) -> Role:
        doc = self._get(ROLES, role_id)
        if doc is None:
            raise RoleNotFoundError(role_id)
        return Role.from_document(role_id, doc)

    def add_role(self, name: str, day: int, tasks: Iterable[Task | dict[str, Any] | str] = ()) -> Role:
        slot_day = _day(day)
        same_day = [d for d in self._docs(ROLES).values() if d.get("day") == slot_day]
        role = Role(
            id=_new_id("role"),
            name=_required_text(name, "Role name"),
            day=slot_day,
            tasks=_merge_tasks((), _tasks(tasks)),
            order=len(same_day),
        )
        self._store.put(self.session_id, ROLES, role.id, role.to_document())
        return role

    def delete_role(self, role_id: str) -> None:
        """Delete a role and clear its name from that day's schedule rows."""
        doc = self._get(ROLES, role_id)
        if doc is None:
            logger.warning("delete_role: %s not found", role_id)
            return
        role = Role.from_document(role_id, doc)
        batch = self._store.batch()
        batch.delete(self.session_id, ROLES, role_id)
        for doc_id, item in self._docs(SCHEDULES).items():
            if item.get("day") == role.day and item.get("roleName") == role.name:
                batch.patch(self.session_id, SCHEDULES, doc_id, {"roleName": None})
        batch.commit()

    def add_tasks_to_role(self, role_id: str, tasks: Iterable[Task | dict[str, Any] | str]) -> Role:
        role = self._role(role_id)
        merged = _merge_tasks(role.tasks, _tasks(tasks))
        self._store.patch(self.session_id, ROLES, role_id, {"tasks": [t.to_document() for t in merged]})
        return Role(id=role.id, name=role.name, day=role.day, tasks=merged, order=role.order)

    def remove_task_from_role(self, role_id: str, task: Task | str) -> Role:
        """Remove every task whose event text matches."""
        role = self._role(role_id)
        event = task.event if isinstance(task, Task) else task
        remaining = tuple(t for t in role.tasks if t.event != event)
        self._store.patch(self.session_id, ROLES, role_id, {"tasks": [t.to_document() for t in remaining]})
        return Role(id=role.id, name=role.name, day=role.day, tasks=remaining, order=role.order)

    def assign_role_to_staff(self, role_id: str, staff_ids: Sequence[str], day: int, time: str) -> list[str]:
        """Give staff every task of a role at one slot.

        A task joins an existing row of the slot with the same event and
        location; otherwise a new row tagged with the role name is created.
        Returns the ids of the touched schedule rows.
        """
        role = self._role(role_id)
        slot = _slot(day, time)
        if not staff_ids:
            return []
        schedules = self._docs(SCHEDULES)

        touched = []
        batch = self._store.batch()
        for task in role.tasks:
            location = task.location or ""
            match = next(
                (
                    (doc_id, doc)
                    for doc_id, doc in sorted(schedules.items())
                    if doc.get("day") == slot.day
                    and doc.get("time") == slot.time
                    and doc.get("event") == task.event
                    and (doc.get("location") or "") == location
                ),
                None,
            )
            if match is None:
                item = ScheduleItem(
                    id=_new_id("sch"),
                    day=slot.day,
                    time=slot.time,
                    event=task.event,
                    location=location,
                    staff_ids=tuple(staff_ids),
                    role_name=role.name,
                )
                batch.set(self.session_id, SCHEDULES, item.id, item.to_document())
                touched.append(item.id)
            else:
                doc_id, doc = match
                current = list(doc.get("staffIds") or [])
                merged = current + [i for i in staff_ids if i not in current]
                batch.patch(self.session_id, SCHEDULES, doc_id, {"staffIds": merged})
                touched.append(doc_id)
        batch.commit()
        return touched

    def add_schedule_templates_to_slot(self, template_ids: Iterable[str], day: int) -> list[Role]:
        """Turn templates into day-scoped roles.

        A role with the template's name on that day keeps its own tasks and
        gains the template's missing ones; otherwise a new role is created.
        """
        slot_day = _day(day)
        template_docs = self._docs(SCHEDULE_TEMPLATES)
        templates = []
        for template_id in template_ids:
            if template_id not in template_docs:
                raise TemplateNotFoundError(template_id)
            templates.append(ScheduleTemplate.from_document(template_id, template_docs[template_id]))

        roles_by_name = {
            doc.get("name"): Role.from_document(doc_id, doc)
            for doc_id, doc in sorted(self._docs(ROLES).items())
            if doc.get("day") == slot_day
        }
        next_order = len(roles_by_name)

        result = []
        batch = self._store.batch()
        for template in templates:
            existing = roles_by_name.get(template.name)
            if existing is None:
                role = Role(
                    id=_new_id("role"),
                    name=template.name,
                    day=slot_day,
                    tasks=template.tasks,
                    order=next_order,
                )
                next_order += 1
            else:
                role = Role(
                    id=existing.id,
                    name=existing.name,
                    day=existing.day,
                    tasks=_merge_tasks(existing.tasks, template.tasks),
                    order=existing.order,
                )
            roles_by_name[role.name] = role
            batch.set(self.session_id, ROLES, role.id, role.to_document())
            result.append(role)
        batch.commit()
        return result

    # Schedule templates

    def add_schedule_template(self, name: str, tasks: Iterable[Task | dict[str, Any] | str]) -> ScheduleTemplate:
        template = ScheduleTemplate(
            id=_new_id("tpl"), name=_required_text(name, "Template name"), tasks=_merge_tasks((), _tasks(tasks))
        )
        self._store.put(self.session_id, SCHEDULE_TEMPLATES, template.id, template.to_document())
        return template

    def update_schedule_template(
        self,
        template_id: str,
        name: str | None = None,
        tasks: Iterable[Task | dict[str, Any] | str] | None = None,
    ) -> ScheduleTemplate:
        doc = self._get(SCHEDULE_TEMPLATES, template_id)
        if doc is None:
            raise TemplateNotFoundError(template_id)
        current = ScheduleTemplate.from_document(template_id, doc)
        template = ScheduleTemplate(
            id=template_id,
            name=_required_text(name, "Template name") if name is not None else current.name,
            tasks=_merge_tasks((), _tasks(tasks)) if tasks is not None else current.tasks,
        )
        self._store.put(self.session_id, SCHEDULE_TEMPLATES, template_id, template.to_document())
        return template

    def delete_schedule_template(self, template_id: str) -> None:
        self._store.delete(self.session_id, SCHEDULE_TEMPLATES, template_id)

    def import_schedule_templates(self, rows: Iterable[dict[str, str]]) -> list[ScheduleTemplate]:
        """Create templates from ``{"name", "tasks"}`` rows; tasks are ``;``-separated."""
        templates = []
        for index, row in enumerate(rows):
            if not (row.get("name") or "").strip():
                raise ValidationError(f"Row {index + 1}: name is required")
            events = [part.strip() for part in (row.get("tasks") or "").split(";")]
            templates.append(
                ScheduleTemplate(
                    id=_new_id("tpl"),
                    name=row["name"].strip(),
                    tasks=_merge_tasks((), _tasks(e for e in events if e)),
                )
            )
        batch = self._store.batch()
        for template in templates:
            batch.set(self.session_id, SCHEDULE_TEMPLATES, template.id, template.to_document())
        batch.commit()
        return templates

    # Positions

    def add_position(self, name: str, color: str) -> Position:
        position = Position(id=_new_id("pos"), name=_required_text(name, "Position name"), color=color)
        self._store.put(self.session_id, POSITIONS, position.id, position.to_document())
        return position

    def update_position(self, position_id: str, name: str | None = None, color: str | None = None) -> None:
        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = _required_text(name, "Position name")
        if color is not None:
            changes["color"] = color
        if self._get(POSITIONS, position_id) is None:
            logger.warning("update_position: %s not found", position_id)
            return
        if changes:
            self._store.patch(self.session_id, POSITIONS, position_id, changes)

    def delete_position(self, position_id: str) -> None:
        """Delete a position and clear it from every staff member holding it."""
        batch = self._store.batch()
        batch.delete(self.session_id, POSITIONS, position_id)
        for doc_id, doc in self._docs(STAFF).items():
            if doc.get("positionId") == position_id:
                batch.patch(self.session_id, STAFF, doc_id, {"positionId": None})
        batch.commit()

    def assign_position_to_staff(self, staff_id: str, position_id: str | None) -> StaffMember:
        return self.update_staff(staff_id, position_id=position_id)

    # Seeding

    def initialize_data(self, venue_name: str = "Main Venue") -> None:
        """Write the venue document and a starter data set in one batch."""
        batch = self._store.batch()
        batch.set(self.session_id, VENUE, VENUE_DOC_ID, VenueInfo(name=venue_name).to_document())
        for collection, doc_id, doc in seed_documents(get_setting("DEFAULT_MAP_IMAGE")):
            batch.set(self.session_id, collection, doc_id, doc)
        batch.commit()
