"""
事件系统实现
Per-session event stream: the push counterpart to polling the session store
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventPriority(Enum):
    """事件优先级"""
    LOW = 25
    NORMAL = 50
    HIGH = 75


@dataclass
class EventMetadata:
    """事件元数据"""
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    source: Optional[str] = None


@dataclass
class Event:
    """基础事件类"""
    session_id: str
    metadata: EventMetadata = field(default_factory=EventMetadata)
    event_type: str = field(default="")

    def __post_init__(self):
        if not self.event_type:
            self.event_type = self.__class__.__name__


@dataclass
class SessionStatusChanged(Event):
    status: str = ""
    generation: int = 1
    error: Optional[str] = None


@dataclass
class TaskStarted(Event):
    task_id: str = ""
    title: str = ""
    role: str = ""


@dataclass
class TaskCompleted(Event):
    task_id: str = ""
    title: str = ""
    role: str = ""
    duration: float = 0.0


@dataclass
class TaskFailed(Event):
    task_id: str = ""
    title: str = ""
    role: str = ""
    error: str = ""
    duration: float = 0.0


@dataclass
class PreviewReady(Event):
    url: str = ""


@dataclass
class EventHandlerDescriptor:
    """事件处理器描述符"""
    handler: Callable
    event_type: str
    priority: EventPriority = EventPriority.NORMAL
    async_handler: bool = True
    filter_func: Optional[Callable[[Event], bool]] = None


class InMemoryEventStore:
    """内存事件存储实现"""

    def __init__(self, max_size: int = 10000):
        self._events: List[Event] = []
        self._max_size = max_size

    def save_event(self, event: Event):
        self._events.append(event)
        if len(self._events) > self._max_size:
            self._events = self._events[-self._max_size:]

    def get_events(self, event_type: Optional[str] = None, session_id: Optional[str] = None,
                   limit: int = 100) -> List[Event]:
        events = self._events
        if event_type:
            events = [e for e in events if e.event_type == event_type]
        if session_id:
            events = [e for e in events if e.session_id == session_id]
        return events[-limit:]


class EventBus:
    """事件总线"""

    def __init__(self, event_store: Optional[InMemoryEventStore] = None):
        self._handlers: Dict[str, List[EventHandlerDescriptor]] = {}
        self._event_store = event_store or InMemoryEventStore()

    def subscribe(
        self,
        event_type: str,
        handler: Callable,
        priority: EventPriority = EventPriority.NORMAL,
        filter_func: Optional[Callable[[Event], bool]] = None,
    ) -> None:
        """订阅事件，event_type为"*"时接收全部事件"""
        descriptor = EventHandlerDescriptor(
            handler=handler,
            event_type=event_type,
            priority=priority,
            async_handler=asyncio.iscoroutinefunction(handler),
            filter_func=filter_func,
        )

        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(descriptor)
        handlers.sort(key=lambda x: x.priority.value, reverse=True)

        logger.debug(f"Subscribed handler for event {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        """取消订阅事件"""
        if event_type in self._handlers:
            self._handlers[event_type] = [
                h for h in self._handlers[event_type] if h.handler != handler
            ]

    async def publish(self, event: Event) -> None:
        """发布事件；处理器异常只记录不传播"""
        self._event_store.save_event(event)

        handlers = self._handlers.get(event.event_type, []) + self._handlers.get("*", [])
        if not handlers:
            logger.debug(f"No handlers for event {event.event_type}")
            return

        for descriptor in handlers:
            if descriptor.filter_func and not descriptor.filter_func(event):
                continue
            try:
                if descriptor.async_handler:
                    await descriptor.handler(event)
                else:
                    descriptor.handler(event)
            except Exception as e:
                logger.error(f"Error in handler for event {event.event_type}: {e}")

    def events_for(self, session_id: str, limit: int = 1000) -> List[Event]:
        return self._event_store.get_events(session_id=session_id, limit=limit)

    def get_handler_count(self, event_type: str) -> int:
        """获取事件处理器数量"""
        return len(self._handlers.get(event_type, []))


def describe_event(event: Event) -> Dict[str, Any]:
    """Flatten an event for JSON output"""
    payload = {
        key: value for key, value in vars(event).items()
        if key not in ("metadata",)
    }
    payload["eventId"] = event.metadata.event_id
    payload["timestamp"] = event.metadata.timestamp.isoformat()
    return payload
