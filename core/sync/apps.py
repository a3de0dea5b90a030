"""
HotelSphere Core — Sync App Configuration
===========================================
Registers the bootstrap marker model.
No startup hooks — bootstrap is triggered explicitly at session start.
"""

from django.apps import AppConfig


class SyncConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.sync"
    label = "sync"
    verbose_name = "HotelSphere Sync"
