"""
Upstream service clients.

Provides the outbound Slack dispatch wrapper and the Mailjet parseroute client.
"""

from providers.dispatch import DispatchClient, DispatchError, DispatchResult, RequestBuildError
from providers.mailjet import MailjetAPIError, MailjetClient, MailjetError, ParseRouteNotFound

__all__ = [
    "DispatchClient",
    "DispatchError",
    "DispatchResult",
    "RequestBuildError",
    "MailjetAPIError",
    "MailjetClient",
    "MailjetError",
    "ParseRouteNotFound",
]
