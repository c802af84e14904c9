from event_registry.models.account import Account
from event_registry.models.event import Event
from event_registry.models.registration import Registration

__all__ = ["Account", "Event", "Registration"]
