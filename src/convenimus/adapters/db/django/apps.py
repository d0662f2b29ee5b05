from django.apps import AppConfig


class DBMainConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "convenimus.adapters.db.django"
    label = "db_main"
