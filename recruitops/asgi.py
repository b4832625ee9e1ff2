"""
ASGI entrypoint for the RecruitOps project.

In-app automation messages are pushed through the Channels layer; this
module exposes the HTTP application for the ASGI server.
"""

import os

from channels.routing import ProtocolTypeRouter
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'recruitops.settings')

application = ProtocolTypeRouter({
    'http': get_asgi_application(),
})
