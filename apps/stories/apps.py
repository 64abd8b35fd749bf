from django.apps import AppConfig  # type: ignore


class StoriesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.stories"
    label = "stories"
