from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    verbose_name = "Rezervace"

    def ready(self):  # type: ignore
        from .handlers import register_handlers

        register_handlers()
