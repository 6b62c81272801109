"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from collections.abc import Callable

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from staffing.domain.errors import DomainError, ErrorCode, NotFoundError
from staffing.domain.value_objects import Slot
from staffing.handlers.serializers import (
    ConfirmInput,
    CopySlotInput,
    ImportSessionInput,
    MarkerPositionInput,
    RenameSessionInput,
    SessionChoiceInput,
    SessionSerializer,
    SlotViewSerializer,
    VenueDataSerializer,
)
from staffing.services.public_projection import ProjectionStatus, PublicProjectionGate
from staffing.services.session_registry import SessionRegistry
from staffing.services.venue_data import VenueDataAggregate
from staffing.stores.client_state import CacheClientState
from staffing.stores.django_store import DjangoEntityStore
from staffing.stores.interfaces import EntityStore

ERROR_STATUS = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.NO_PUBLIC_SESSION: status.HTTP_409_CONFLICT,
    ErrorCode.LOAD_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.BATCH_WRITE_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
}

PROJECTION_STATUS = {
    ProjectionStatus.NO_PUBLIC_SESSION: (status.HTTP_404_NOT_FOUND, "No session is currently public"),
    ProjectionStatus.NO_LONGER_PUBLIC: (status.HTTP_404_NOT_FOUND, "Sharing was stopped by an administrator"),
    ProjectionStatus.ACCESS_DENIED: (status.HTTP_403_FORBIDDEN, "Access denied, please refresh"),
    ProjectionStatus.LOAD_FAILED: (status.HTTP_503_SERVICE_UNAVAILABLE, "Failed to load data"),
    ProjectionStatus.LOADING: (status.HTTP_503_SERVICE_UNAVAILABLE, "Data is still loading, please retry"),
}


def get_store() -> EntityStore:
    return DjangoEntityStore()


def error_response(error: DomainError) -> Response:
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST)
    return Response({"code": error.code.value, "message": error.message}, status=code)


def confirmation_required(message: str) -> Response:
    return Response({"code": "CONFIRMATION_REQUIRED", "message": message}, status=status.HTTP_409_CONFLICT)


class DomainErrorView(APIView):
    """Maps domain errors raised by services to error responses."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        return super().handle_exception(exc)


class EditorView(DomainErrorView):
    """Base for authenticated editor endpoints."""

    _registry: SessionRegistry | None = None

    def registry(self, request: Request) -> SessionRegistry:
        if self._registry is None:
            owner_id = request.user.get_username()
            client_id = request.headers.get("X-Client-Id") or owner_id
            self._registry = SessionRegistry(get_store(), CacheClientState(client_id), owner_id)
        return self._registry

    def finalize_response(self, request, response, *args, **kwargs):
        if self._registry is not None:
            self._registry.close()
            self._registry = None
        return super().finalize_response(request, response, *args, **kwargs)

    def aggregate(self, request: Request, session_id: str) -> VenueDataAggregate:
        self.registry(request).get_session(session_id)
        return VenueDataAggregate(get_store(), session_id)


class SessionListView(EditorView):
    """Handler for GET /api/sessions"""

    def get(self, request: Request) -> Response:
        registry = self.registry(request)
        sessions = registry.list_sessions()
        return Response(
            {
                "results": SessionSerializer(sessions, many=True).data,
                "activeSessionId": registry.active_session_id(),
            }
        )


class SessionDetailView(EditorView):
    """Handler for PATCH /api/sessions/{session_id}"""

    def patch(self, request: Request, session_id: str) -> Response:
        payload = RenameSessionInput(data=request.data)
        payload.is_valid(raise_exception=True)
        session = self.registry(request).rename(session_id, payload.validated_data["name"])
        return Response(SessionSerializer(session).data)


class ActiveSessionView(EditorView):
    """Handler for PUT /api/sessions/active"""

    def put(self, request: Request) -> Response:
        payload = SessionChoiceInput(data=request.data)
        payload.is_valid(raise_exception=True)
        self.registry(request).set_active(payload.validated_data["session"])
        return Response({"activeSessionId": payload.validated_data["session"]})


class SessionImportView(EditorView):
    """Handler for POST /api/sessions/{session_id}/import"""

    def post(self, request: Request, session_id: str) -> Response:
        payload = ImportSessionInput(data=request.data)
        payload.is_valid(raise_exception=True)
        source = payload.validated_data["source"]
        if not payload.validated_data["confirm"]:
            return confirmation_required(
                f"All staff, roles, schedules, maps and markers of session {session_id} "
                f"will be replaced by those of session {source}."
            )
        self.registry(request).import_from(source, session_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PublicSessionView(EditorView):
    """Handler for GET/PUT /api/sessions/public"""

    def get(self, request: Request) -> Response:
        return Response({"session": self.registry(request).public_session_id()})

    def put(self, request: Request) -> Response:
        payload = SessionChoiceInput(data=request.data)
        payload.is_valid(raise_exception=True)
        registry = self.registry(request)
        registry.set_public(payload.validated_data["session"])
        return Response({"session": registry.public_session_id()})


class SlotDetailView(EditorView):
    """Handler for GET /api/sessions/{session_id}/slots/{day}/{time}"""

    def get(self, request: Request, session_id: str, day: int, time: str) -> Response:
        with self.aggregate(request, session_id) as aggregate:
            view = aggregate.slot_view(day, time)
        return Response(SlotViewSerializer(view).data)


class MarkerPositionView(EditorView):
    """Handler for PUT /api/sessions/{session_id}/markers/{marker_id}"""

    def put(self, request: Request, session_id: str, marker_id: str) -> Response:
        payload = MarkerPositionInput(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        aggregate = self.aggregate(request, session_id)
        marker = aggregate.update_marker_position(
            marker_id, data["x"], data["y"], data["staffIds"], data["day"], data["time"]
        )
        if marker is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(marker.to_document())


class SlotCopyView(EditorView):
    """Handler for POST /api/sessions/{session_id}/slots/copy"""

    def post(self, request: Request, session_id: str) -> Response:
        payload = CopySlotInput(data=request.data)
        payload.is_valid(raise_exception=True)
        source = Slot(**payload.validated_data["source"])
        target = Slot(**payload.validated_data["target"])
        if not payload.validated_data["confirm"]:
            return confirmation_required(f"Schedule, markers and map of {target} will be overwritten by {source}.")
        self.aggregate(request, session_id).copy_time_slot_data(source, target)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ScheduleToggleView(EditorView):
    """Handler for POST /api/sessions/{session_id}/schedules/{schedule_id}/toggle"""

    def post(self, request: Request, session_id: str, schedule_id: str) -> Response:
        completed = self.aggregate(request, session_id).toggle_schedule_completion(schedule_id)
        return Response({"id": schedule_id, "isCompleted": completed})


class StaffDetailView(EditorView):
    """Handler for DELETE /api/sessions/{session_id}/staff/{staff_id}"""

    def delete(self, request: Request, session_id: str, staff_id: str) -> Response:
        payload = ConfirmInput(data=request.data)
        payload.is_valid(raise_exception=True)
        if not payload.validated_data["confirm"]:
            return confirmation_required(
                "The staff member will be removed from every schedule and marker; "
                "markers left empty are deleted."
            )
        self.aggregate(request, session_id).delete_staff(staff_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PublicView(DomainErrorView):
    """Base for anonymous viewer endpoints over the public projection."""

    permission_classes = [AllowAny]

    def projection_response(self, render: Callable[[PublicProjectionGate], dict]) -> Response:
        with PublicProjectionGate(get_store()) as gate:
            state = gate.status
            if state is ProjectionStatus.READY and gate.data is not None:
                return Response({"session": gate.session_id, **render(gate)})
        code, message = PROJECTION_STATUS[state]
        return Response({"code": state.value, "message": message}, status=code)


class PublicViewerView(PublicView):
    """Handler for GET /api/public"""

    def get(self, request: Request) -> Response:
        return self.projection_response(lambda gate: VenueDataSerializer(gate.data).data)


class PublicSlotView(PublicView):
    """Handler for GET /api/public/slots/{day}/{time}"""

    def get(self, request: Request, day: int, time: str) -> Response:
        return self.projection_response(lambda gate: SlotViewSerializer(gate.view.slot_view(day, time)).data)
