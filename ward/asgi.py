"""
ASGI config for the ward project.

Requests are plain HTTP; PDF and attachment downloads stream through
Django's response classes, so no extra protocol routing is needed.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ward.settings")

application = get_asgi_application()
