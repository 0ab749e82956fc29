from django.apps import AppConfig


class Config(AppConfig):
    name = "Cinnamon.sso"
    label = "sso"
    verbose_name = "sso"

    # Set once in ready(); every handshaker signs with this token.
    consumer_token = None

    def ready(self):
        from Cinnamon.sso.oauth import load_consumer_token

        self.consumer_token = load_consumer_token()
