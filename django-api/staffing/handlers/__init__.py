from staffing.handlers.views import (
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

__all__ = [
    "ActiveSessionView",
    "MarkerPositionView",
    "PublicSessionView",
    "PublicSlotView",
    "PublicViewerView",
    "ScheduleToggleView",
    "SessionDetailView",
    "SessionImportView",
    "SessionListView",
    "SlotCopyView",
    "SlotDetailView",
    "StaffDetailView",
]
