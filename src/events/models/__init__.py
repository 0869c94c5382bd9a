from .event import Event
from .registration import Registration
from .ticket import TicketType

__all__ = ["Event", "Registration", "TicketType"]
