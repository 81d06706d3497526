"""View models behind the console routes. Each takes the backend it talks to."""

from views.audiences import AudienceManager
from views.auth import AuthState, TokenStore
from views.businesses import BusinessManager
from views.credits import CreditPricingView, format_credits
from views.info import InfoView
from views.listing import AudienceListView, BusinessListView, ListView, page_window, showing_range
from views.sessions import SessionManager

__all__ = [
    "AudienceManager",
    "AuthState",
    "TokenStore",
    "BusinessManager",
    "CreditPricingView",
    "format_credits",
    "InfoView",
    "AudienceListView",
    "BusinessListView",
    "ListView",
    "page_window",
    "showing_range",
    "SessionManager",
]
