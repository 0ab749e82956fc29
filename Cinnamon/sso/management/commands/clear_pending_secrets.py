import logging

from django.core.management.base import BaseCommand

from Cinnamon.sso.relay import get_secret_relay

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Delete request token secrets whose login was never completed."

    def handle(self, *args, **options):
        deleted = get_secret_relay().sweep()
        logger.info("Cleared {count} pending secrets.".format(count=deleted))
        self.stdout.write("{count} expired pending secrets deleted.".format(count=deleted))
