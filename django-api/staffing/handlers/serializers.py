"""Serializers for transforming domain models to API responses, and for request input."""

from rest_framework import serializers

from staffing.domain.value_objects import DAYS, TIME_SLOTS


class SessionSerializer(serializers.Serializer):
    """Serializer for Session domain model."""

    id = serializers.CharField()
    name = serializers.CharField()
    ownerId = serializers.CharField(source="owner_id")


class StaffSerializer(serializers.Serializer):
    """Serializer for StaffMember domain model."""

    id = serializers.CharField()
    name = serializers.CharField()
    avatar = serializers.CharField()
    role = serializers.CharField(source="role.value")
    positionId = serializers.CharField(source="position_id", allow_null=True)


class MarkerSerializer(serializers.Serializer):
    """Serializer for both marker variants."""

    id = serializers.CharField()
    staffIds = serializers.ListField(child=serializers.CharField(), source="staff_ids")
    day = serializers.IntegerField()
    time = serializers.CharField()
    x = serializers.FloatField()
    y = serializers.FloatField()
    isDerived = serializers.BooleanField(source="is_derived")


class ScheduleItemSerializer(serializers.Serializer):
    """Serializer for ScheduleItem domain model."""

    id = serializers.CharField()
    day = serializers.IntegerField()
    time = serializers.CharField()
    event = serializers.CharField()
    location = serializers.CharField(allow_blank=True)
    staffIds = serializers.ListField(child=serializers.CharField(), source="staff_ids")
    roleName = serializers.CharField(source="role_name", allow_null=True)
    isCompleted = serializers.BooleanField(source="is_completed")


class TaskSerializer(serializers.Serializer):
    event = serializers.CharField()
    location = serializers.CharField(allow_null=True, required=False)


class RoleSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    day = serializers.IntegerField()
    tasks = TaskSerializer(many=True)
    order = serializers.IntegerField(allow_null=True)


class PositionSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    color = serializers.CharField()


class SlotViewSerializer(serializers.Serializer):
    """Serializer for a reconciled slot."""

    day = serializers.IntegerField(source="slot.day")
    time = serializers.CharField(source="slot.time")
    title = serializers.CharField(allow_blank=True)
    mapImageUrl = serializers.CharField(source="map_image_url")
    notification = serializers.CharField(allow_blank=True)
    markers = MarkerSerializer(many=True)
    unassignedStaff = StaffSerializer(source="unassigned_staff", many=True)
    schedule = ScheduleItemSerializer(many=True)


class MapInfoSerializer(serializers.Serializer):
    id = serializers.CharField()
    day = serializers.IntegerField()
    time = serializers.CharField()
    mapImageUrl = serializers.CharField(source="map_image_url")


class TimeSlotInfoSerializer(serializers.Serializer):
    id = serializers.CharField()
    day = serializers.IntegerField()
    time = serializers.CharField()
    title = serializers.CharField(allow_blank=True)


class ScheduleTemplateSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    tasks = TaskSerializer(many=True)


class VenueDataSerializer(serializers.Serializer):
    """Serializer for the composed VenueData view (viewer projection)."""

    venueName = serializers.CharField(source="venue.name", allow_blank=True)
    notification = serializers.CharField(allow_blank=True)
    staff = StaffSerializer(many=True)
    roles = RoleSerializer(many=True)
    schedule = ScheduleItemSerializer(many=True)
    markers = MarkerSerializer(many=True)
    maps = MapInfoSerializer(many=True)
    timeSlotInfos = TimeSlotInfoSerializer(source="time_slot_infos", many=True)
    scheduleTemplates = ScheduleTemplateSerializer(source="schedule_templates", many=True)
    positions = PositionSerializer(many=True)


class RenameSessionInput(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, trim_whitespace=False)


class ConfirmInput(serializers.Serializer):
    confirm = serializers.BooleanField(default=False)


class ImportSessionInput(ConfirmInput):
    source = serializers.CharField()


class SessionChoiceInput(serializers.Serializer):
    """A session id; the public selector also accepts "none"."""

    session = serializers.CharField()


class SlotInput(serializers.Serializer):
    day = serializers.ChoiceField(choices=DAYS)
    time = serializers.ChoiceField(choices=TIME_SLOTS)


class CopySlotInput(ConfirmInput):
    source = SlotInput()
    target = SlotInput()


class MarkerPositionInput(serializers.Serializer):
    x = serializers.FloatField()
    y = serializers.FloatField()
    staffIds = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    day = serializers.IntegerField(required=False, allow_null=True, default=None)
    time = serializers.CharField(required=False, allow_null=True, default=None)
