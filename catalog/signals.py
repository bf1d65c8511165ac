from django.db.models.signals import post_delete
from django.dispatch import receiver

from catalog.models import Session


@receiver(post_delete, sender=Session)
def detach_deleted_session_times(sender, *, instance: Session, **kwargs) -> None:
    """
    Orphan the schedule of a deleted session so the database clean-up job
    can remove it in bounded batches.
    """
    instance.detach_times()
