from django.urls import path

from staffing.handlers import (
    ActiveSessionView,
    MarkerPositionView,
    PublicSessionView,
    PublicSlotView,
    PublicViewerView,
    ScheduleToggleView,
    SessionDetailView,
    SessionImportView,
    SessionListView,
    SlotCopyView,
    SlotDetailView,
    StaffDetailView,
)

urlpatterns = [
    path("sessions", SessionListView.as_view(), name="session-list"),
    path("sessions/active", ActiveSessionView.as_view(), name="session-active"),
    path("sessions/public", PublicSessionView.as_view(), name="session-public"),
    path("sessions/<str:session_id>", SessionDetailView.as_view(), name="session-detail"),
    path("sessions/<str:session_id>/import", SessionImportView.as_view(), name="session-import"),
    path(
        "sessions/<str:session_id>/slots/copy",
        SlotCopyView.as_view(),
        name="slot-copy",
    ),
    path(
        "sessions/<str:session_id>/slots/<int:day>/<str:time>",
        SlotDetailView.as_view(),
        name="slot-detail",
    ),
    path(
        "sessions/<str:session_id>/markers/<str:marker_id>",
        MarkerPositionView.as_view(),
        name="marker-position",
    ),
    path(
        "sessions/<str:session_id>/schedules/<str:schedule_id>/toggle",
        ScheduleToggleView.as_view(),
        name="schedule-toggle",
    ),
    path(
        "sessions/<str:session_id>/staff/<str:staff_id>",
        StaffDetailView.as_view(),
        name="staff-detail",
    ),
    path("public", PublicViewerView.as_view(), name="public-viewer"),
    path("public/slots/<int:day>/<str:time>", PublicSlotView.as_view(), name="public-slot"),
]
