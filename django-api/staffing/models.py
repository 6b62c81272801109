"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
Every entity is a JSON document addressed by (partition, collection, doc_id);
the partition is the owning session id, or "" for the sessions collection.
"""

from django.db import models


class Document(models.Model):
    """Persistence model for one entity-store document."""

    partition = models.CharField(max_length=100, blank=True, default="")
    collection = models.CharField(max_length=50)
    doc_id = models.CharField(max_length=200)
    data = models.JSONField(default=dict)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["partition", "collection", "doc_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["partition", "collection", "doc_id"],
                name="unique_document_per_collection",
            ),
        ]
        indexes = [
            models.Index(fields=["partition", "collection"], name="document_partition_coll_idx"),
            models.Index(fields=["collection"], name="document_collection_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.partition or '/'}:{self.collection}/{self.doc_id}"
