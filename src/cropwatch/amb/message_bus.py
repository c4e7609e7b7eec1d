"""
Message Bus Implementation

Thread-safe pub/sub message bus connecting the survey, monitor and claims
agents.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from queue import Queue
from threading import Lock
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from ..models import utcnow

logger = logging.getLogger(__name__)


class MessageType(Enum):
    """Types of messages in the system."""
    NDVI_SERIES = "ndvi_series"
    ALERT = "alert"
    CLAIM = "claim"
    SYSTEM = "system"


@dataclass
class Message:
    """
    A message passed between agents on the bus.

    Attributes:
        type: The message category
        topic: The topic channel
        payload: JSON-shaped data
        source: Originating agent ID
        timestamp: When the message was created
        correlation_id: Links the messages of one run
        message_id: Unique identifier
    """
    type: MessageType
    topic: str
    payload: Dict[str, Any]
    source: str
    timestamp: datetime = field(default_factory=utcnow)
    correlation_id: Optional[str] = None
    message_id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize message to dictionary."""
        return {
            "message_id": self.message_id,
            "type": self.type.value,
            "topic": self.topic,
            "payload": self.payload,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": self.correlation_id,
        }


class MessageBus:
    """
    Thread-safe publish/subscribe message bus.

    Delivery is synchronous, in subscription order, and happens outside the
    bus lock, so a handler may publish follow-up messages.
    """

    def __init__(self, max_history: int = 1000):
        self._subscribers: Dict[str, List[Callable[[Message], None]]] = {}
        self._queues: Dict[str, Queue] = {}
        self._lock = Lock()
        self._message_history: List[Message] = []
        self._max_history = max_history

    def subscribe(
        self,
        topic: str,
        callback: Callable[[Message], None],
        agent_id: Optional[str] = None
    ) -> None:
        """
        Subscribe to a topic with a callback function.

        Args:
            topic: The topic to subscribe to
            callback: Function called when a message arrives
            agent_id: Optional identifier for the subscribing agent
        """
        with self._lock:
            self._subscribers.setdefault(topic, []).append(callback)
        logger.debug("%s subscribed to %s", agent_id or "anonymous", topic)

    def subscribe_queue(self, topic: str, agent_id: str) -> Queue:
        """
        Subscribe to a topic with a queue for polling.

        Returns:
            Queue that will receive messages
        """
        with self._lock:
            queue_key = f"{topic}:{agent_id}"
            if queue_key not in self._queues:
                self._queues[queue_key] = Queue()
                self._subscribers.setdefault(topic, []).append(self._queues[queue_key].put)
            return self._queues[queue_key]

    def publish(self, message: Message) -> None:
        """
        Publish a message to its topic.

        A subscriber that raises is logged and skipped; the remaining
        subscribers still receive the message.
        """
        with self._lock:
            self._message_history.append(message)
            if len(self._message_history) > self._max_history:
                self._message_history.pop(0)
            callbacks = list(self._subscribers.get(message.topic, []))

        for callback in callbacks:
            try:
                callback(message)
            except Exception:
                logger.exception(
                    "Error delivering %s message %s on %s",
                    message.type.value, message.message_id, message.topic,
                )

    def get_history(
        self,
        topic: Optional[str] = None,
        limit: int = 100
    ) -> List[Message]:
        """
        Get message history, optionally filtered by topic.

        Args:
            topic: Filter by this topic (None for all)
            limit: Maximum messages to return

        Returns:
            The most recent messages, oldest first
        """
        with self._lock:
            if topic:
                filtered = [m for m in self._message_history if m.topic == topic]
            else:
                filtered = self._message_history.copy()
            return filtered[-limit:]

    def clear(self) -> None:
        """Clear all subscriptions and history."""
        with self._lock:
            self._subscribers.clear()
            self._queues.clear()
            self._message_history.clear()
