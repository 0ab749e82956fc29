from django.core import management
from django_cron import CronJobBase, Schedule
from sentry_sdk import capture_exception

EVERY_TEN_MINUTES = 10


class ClearPendingSecrets(CronJobBase):
    schedule = Schedule(run_every_mins=EVERY_TEN_MINUTES)
    code = "sso.clear_pending_secrets"

    def do(self):
        try:
            management.call_command("clear_pending_secrets")
        except Exception as e:
            capture_exception(e)
