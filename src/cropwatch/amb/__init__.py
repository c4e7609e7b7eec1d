"""
AMB - Agent Message Bus

Messaging infrastructure for the crop insurance swarm.
Provides pub/sub messaging with topic-based routing.
"""

from .message_bus import MessageBus, Message, MessageType
from .topics import Topics

__all__ = ["MessageBus", "Message", "MessageType", "Topics"]
