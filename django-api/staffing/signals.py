"""Django signals for subscription fan-out and cache invalidation."""

from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from staffing.models import Document
from staffing.services.public_projection import PUBLIC_SESSION_CACHE_KEY
from staffing.stores.django_store import hub
from staffing.stores.interfaces import VENUE


@receiver([post_save, post_delete], sender=Document)
def publish_document_change(sender, instance, **kwargs):
    """Deliver fresh snapshots to subscribers once the write is committed."""
    partition, collection = instance.partition, instance.collection
    transaction.on_commit(lambda: hub.publish(partition, collection))


@receiver([post_save, post_delete], sender=Document)
def invalidate_public_session_cache(sender, instance, **kwargs):
    """Invalidate the public-session lookup when a venue document changes."""
    if instance.collection == VENUE:
        cache.delete(PUBLIC_SESSION_CACHE_KEY)
