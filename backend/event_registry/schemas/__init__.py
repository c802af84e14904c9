from event_registry.schemas.account import AccountCreate, AccountResponse, AccountLogin, Token
from event_registry.schemas.event import EventRequest, EventResponse, CreatedResponse, MessageResponse
from event_registry.schemas.registration import RegistrationRequest, RegistrationResponse, RegistrationDetails

__all__ = [
    "AccountCreate", "AccountResponse", "AccountLogin", "Token",
    "EventRequest", "EventResponse", "CreatedResponse", "MessageResponse",
    "RegistrationRequest", "RegistrationResponse", "RegistrationDetails",
]
