from django.apps import AppConfig


class ReplenishmentConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.replenishment"
    label = "replenishment"

    def ready(self) -> None:
        from modules.replenishment.events import (
            ReplenishmentFulfilled,
            ReplenishmentRequested,
        )
        from modules.replenishment.handlers import (
            replenishment_fulfilled_handler,
            replenishment_requested_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(ReplenishmentRequested, replenishment_requested_handler)
        event_bus.subscribe(ReplenishmentFulfilled, replenishment_fulfilled_handler)
