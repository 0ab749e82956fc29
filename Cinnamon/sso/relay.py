import logging
import threading
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.module_loading import import_string

from websignon.errors import NotFoundError
from websignon.relay import DEFAULT_TTL

from .models import PendingSecret

logger = logging.getLogger(__name__)

_relays = {}
_relays_lock = threading.Lock()


class DatabaseSecretRelay(object):
    """
    Keeps pending secrets in the database, so they survive restarts and are
    shared by every worker process.
    """

    def __init__(self, ttl=DEFAULT_TTL):
        self.ttl = ttl

    def _cutoff(self):
        return timezone.now() - timedelta(seconds=self.ttl)

    def put(self, token, secret):
        PendingSecret.objects.update_or_create(
            token=token, defaults={"secret": secret, "created": timezone.now()}
        )

    def take(self, token):
        with transaction.atomic():
            pending = (
                PendingSecret.objects.select_for_update().filter(token=token).first()
            )
            if pending is None:
                raise NotFoundError("No pending secret for request token.")

            # Whoever deletes the row as it was read owns the secret. A
            # concurrent take, or a put overwriting it, leaves zero rows here.
            deleted, _ = PendingSecret.objects.filter(
                pk=pending.pk, secret=pending.secret, created=pending.created
            ).delete()
        if not deleted:
            raise NotFoundError("Pending secret for request token was already taken.")

        if pending.created < self._cutoff():
            raise NotFoundError("Pending secret for request token has expired.")

        return pending.secret

    def sweep(self):
        deleted, _ = PendingSecret.objects.filter(created__lt=self._cutoff()).delete()
        if deleted:
            logger.info("Swept {count} expired secrets.".format(count=deleted))
        return deleted


def get_secret_relay():
    """
    Returns the relay configured by CINNAMON_SECRET_RELAY. One instance per
    backend and TTL is shared by the whole process, so the in-memory backend
    sees the secrets stored by earlier requests.
    """
    key = (settings.CINNAMON_SECRET_RELAY, settings.CINNAMON_SECRET_RELAY_TTL)
    with _relays_lock:
        if key not in _relays:
            relay_class = import_string(key[0])
            _relays[key] = relay_class(ttl=key[1])
        return _relays[key]
