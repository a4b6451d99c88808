from .account import Account
from .project import Project
from .revision import Revision
from .payment import Payment
from .webhook_events import WebhookEvent
from .waitlist import WaitlistEntry

__all__ = [
    "Account",
    "Project",
    "Revision",
    "Payment",
    "WebhookEvent",
    "WaitlistEntry",
]
