from .models import ListenerRegistration
from .registry import InMemoryListenerRegistry

__all__ = ["ListenerRegistration", "InMemoryListenerRegistry"]
