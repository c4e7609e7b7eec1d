"""
Base Agent Class

Foundation class for all agents in the crop insurance swarm.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..amb import Message, MessageBus, MessageType
from ..models import utcnow

logger = logging.getLogger(__name__)


class AgentState(Enum):
    """Agent lifecycle states."""
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass
class AgentMetrics:
    """Runtime metrics for an agent."""
    messages_received: int = 0
    messages_sent: int = 0
    errors: int = 0
    start_time: Optional[datetime] = None
    last_activity: Optional[datetime] = None
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messages_received": self.messages_received,
            "messages_sent": self.messages_sent,
            "errors": self.errors,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "last_activity": self.last_activity.isoformat() if self.last_activity else None,
            "last_error": self.last_error,
        }


class Agent(ABC):
    """
    Base class for all agents in the swarm.

    Agents:
    - Subscribe to topics on the message bus
    - Process messages with the pipeline components they are given
    - Publish results back to the bus

    Lifecycle:
        1. Created with agent_id and bus reference
        2. start() - subscribes to topics
        3. stop() - ignores further messages
    """

    def __init__(
        self,
        agent_id: str,
        bus: MessageBus,
        name: Optional[str] = None,
    ):
        """
        Initialize an agent.

        Args:
            agent_id: Unique identifier for this agent
            bus: Reference to the message bus
            name: Human-readable name (defaults to agent_id)
        """
        self.agent_id = agent_id
        self.bus = bus
        self.name = name or agent_id

        self._state = AgentState.CREATED
        self._metrics = AgentMetrics()

    @property
    def state(self) -> AgentState:
        """Current agent state."""
        return self._state

    @property
    def metrics(self) -> AgentMetrics:
        """Agent metrics."""
        return self._metrics

    @property
    @abstractmethod
    def subscribed_topics(self) -> List[str]:
        """Topics this agent subscribes to."""
        pass

    @abstractmethod
    def handle_message(self, message: Message) -> None:
        """
        Process a received message.

        Args:
            message: The message to process
        """
        pass

    def start(self) -> None:
        """Subscribe to topics and begin handling messages."""
        if self._state != AgentState.CREATED:
            raise RuntimeError(f"Cannot start agent in state {self._state}")

        self._metrics.start_time = utcnow()
        for topic in self.subscribed_topics:
            self.bus.subscribe(topic, self._on_message, self.agent_id)

        self._state = AgentState.RUNNING
        self._log(f"Agent started, subscribed to: {self.subscribed_topics}")

    def stop(self) -> None:
        """Stop handling messages."""
        self._state = AgentState.STOPPED
        self._log("Agent stopped")

    def _on_message(self, message: Message) -> None:
        """
        Internal message handler with metrics and error handling.
        """
        if self._state == AgentState.STOPPED:
            return
        self._metrics.messages_received += 1
        self._metrics.last_activity = utcnow()

        try:
            self.handle_message(message)
        except Exception as e:
            self._metrics.errors += 1
            self._metrics.last_error = str(e)
            self._log(f"Error handling message {message.message_id}: {e}", level=logging.ERROR)
            self._state = AgentState.ERROR

    def publish(
        self,
        topic: str,
        payload: Dict[str, Any],
        message_type: MessageType = MessageType.SYSTEM,
        correlation_id: Optional[str] = None,
    ) -> None:
        """
        Publish a message to the bus.

        Args:
            topic: The topic to publish to
            payload: The message data
            message_type: Type of message
            correlation_id: Optional correlation ID for request tracking
        """
        message = Message(
            type=message_type,
            topic=topic,
            payload=payload,
            source=self.agent_id,
            correlation_id=correlation_id,
        )

        self._metrics.messages_sent += 1
        self._metrics.last_activity = utcnow()
        self.bus.publish(message)

    def _log(self, message: str, level: int = logging.INFO) -> None:
        """Log a message with agent context."""
        logger.log(level, "[%s] %s", self.name, message,
                   extra={"agent_id": self.agent_id, "agent": self.name})
