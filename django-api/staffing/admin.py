from django.contrib import admin

from staffing.models import Document


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ["partition", "collection", "doc_id", "updated_at"]
    list_filter = ["collection"]
    search_fields = ["partition", "doc_id"]
