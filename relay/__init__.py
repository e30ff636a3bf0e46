"""
Relay core: inbound email translation and parse route registration.
"""

from relay.registrar import RouteRegistrar, start_route_registration, webhook_url
from relay.translator import translate

__all__ = [
    "RouteRegistrar",
    "start_route_registration",
    "translate",
    "webhook_url",
]
