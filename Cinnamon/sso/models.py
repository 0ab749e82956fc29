# -*- coding: utf-8 -*-

"""
Request token secrets waiting for the provider's callback.

A row is written when a user is sent off to the provider and deleted when the
provider sends them back, or by the clear_pending_secrets command once it is
older than CINNAMON_SECRET_RELAY_TTL.
"""

from django.db import models
from django.utils import timezone


class PendingSecret(models.Model):
    class Meta:
        app_label = "sso"
        verbose_name = "pending secret"
        verbose_name_plural = "pending secrets"

    token = models.CharField(
        max_length=255, unique=True, help_text="Request token issued by the provider."
    )
    secret = models.CharField(
        max_length=255, help_text="Secret issued alongside the request token."
    )
    # Not auto_now_add: storing a token again restarts its clock.
    created = models.DateTimeField(default=timezone.now, db_index=True)

    def __str__(self):
        return "pending secret for {token}".format(token=self.token)
