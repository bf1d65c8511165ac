from django.core.cache import caches
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from configuration.models import Configuration
from configuration.utils import CONFIGURATION_KEY_PREFIX, cache_configuration_value


@receiver(post_save, sender=Configuration)
def update_cached_configuration_value(
    sender: type[Configuration], *, instance: Configuration, **kwargs
) -> None:
    """
    Refresh the cached value whenever a Configuration row is saved.

    If the stored text cannot be parsed for its data type the cache is left
    untouched rather than caching an invalid value.
    """
    try:
        value = instance.get_value()
    except ValueError:
        # json.JSONDecodeError is a ValueError
        return
    cache_configuration_value(instance.key, value)


@receiver(post_delete, sender=Configuration)
def forget_cached_configuration_value(
    sender: type[Configuration], *, instance: Configuration, **kwargs
) -> None:
    caches["configuration_cache"].delete(
        f"{CONFIGURATION_KEY_PREFIX}_{instance.key}"
    )
