from django.apps import AppConfig


class ConsignmentConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'gearops.consignment'
