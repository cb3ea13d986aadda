from django.apps import AppConfig


class MarketplaceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "marketplace"

    def ready(self):
        from marketplace.infra.events.listeners import register_marketplace_listeners
        from marketplace.infra.observability.tracing import setup_tracing

        setup_tracing()
        register_marketplace_listeners()
