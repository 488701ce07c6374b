"""In-process form engine boundary.

A `FormInstance` is one live survey session. It exposes named event
channels that accept any number of independently removable subscribers.
Channels dispatch asynchronously: a subscriber may return an awaitable and
the channel awaits it before calling the next one, so an async completion
handler holds back the engine's own completion sequencing.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

Handler = Callable[..., Union[None, Awaitable[Any]]]

ON_UPDATE_QUESTION_CSS_CLASSES = "on_update_question_css_classes"
ON_UPLOAD_FILES = "on_upload_files"
ON_COMPLETE = "on_complete"
ON_VALUE_CHANGED = "on_value_changed"
ON_CURRENT_PAGE_CHANGED = "on_current_page_changed"
ON_STARTED = "on_started"

CHANNEL_NAMES = (
    ON_UPDATE_QUESTION_CSS_CLASSES,
    ON_UPLOAD_FILES,
    ON_COMPLETE,
    ON_VALUE_CHANGED,
    ON_CURRENT_PAGE_CHANGED,
    ON_STARTED,
)


class ChannelNotFoundError(LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"form has no event channel named {name!r}")
        self.name = name


class EventChannel:
    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: List[Handler] = []

    def add(self, handler: Handler) -> None:
        self._subscribers.append(handler)

    def remove(self, handler: Handler) -> bool:
        """Remove one subscription of `handler`; False if it was not subscribed."""
        try:
            self._subscribers.remove(handler)
        except ValueError:
            return False
        return True

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, handler: object) -> bool:
        return handler in self._subscribers

    async def fire(self, sender: "FormInstance", options: Any = None) -> None:
        for handler in list(self._subscribers):
            outcome = handler(sender, options)
            if inspect.isawaitable(outcome):
                await outcome


@dataclass
class Question:
    name: str
    type: str = "text"

    def get_type(self) -> str:
        return self.type


@dataclass
class FileBlob:
    name: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class UploadEvent:
    """Files picked for one question plus the engine's result callback.

    The callback takes `("success", payload)` or `("error",)`.
    """

    question: Question
    files: List[FileBlob]
    callback: Callable[..., None]


@dataclass
class CssUpdate:
    question: Question
    css_classes: Dict[str, str] = field(default_factory=lambda: {"root": ""})


def _questions_from_schema(schema: Mapping[str, Any]) -> List[Question]:
    elements: List[Mapping[str, Any]] = list(schema.get("elements") or [])
    for page in schema.get("pages") or []:
        elements.extend(page.get("elements") or [])
    return [Question(name=str(e["name"]), type=str(e.get("type", "text"))) for e in elements if "name" in e]


class FormInstance:
    def __init__(self, schema: Optional[Mapping[str, Any]] = None, channels: Iterable[str] = CHANNEL_NAMES) -> None:
        self.channels: Dict[str, EventChannel] = {name: EventChannel(name) for name in channels}
        self.schema: Dict[str, Any] = {}
        self.questions: List[Question] = []
        self.data: Dict[str, Any] = {}
        self.uploads: Dict[str, Any] = {}
        self.state = "running"
        self.destroyed = False
        if schema:
            self.from_json(schema)

    def get_channel(self, name: str) -> Optional[EventChannel]:
        return self.channels.get(name)

    def channel(self, name: str) -> EventChannel:
        found = self.channels.get(name)
        if found is None:
            raise ChannelNotFoundError(name)
        return found

    def from_json(self, schema: Mapping[str, Any]) -> None:
        self.schema = dict(schema)
        self.questions = _questions_from_schema(schema)

    def get_question(self, name: str) -> Question:
        for q in self.questions:
            if q.name == name:
                return q
        raise KeyError(name)

    async def set_value(self, name: str, value: Any) -> None:
        self.data[name] = value
        await self.channel(ON_VALUE_CHANGED).fire(self, {"name": name, "value": value})

    async def css_classes_for(self, question_name: str) -> Dict[str, str]:
        update = CssUpdate(question=self.get_question(question_name))
        await self.channel(ON_UPDATE_QUESTION_CSS_CLASSES).fire(self, update)
        return update.css_classes

    async def upload_files(self, question_name: str, files: List[FileBlob]) -> UploadEvent:
        question = self.get_question(question_name)
        self.uploads[question_name] = {"status": "uploading"}

        def callback(status: str, payload: Any = None) -> None:
            if self.destroyed:
                logger.debug("form.upload_callback_after_destroy question=%s status=%s", question_name, status)
                return
            self.uploads[question_name] = {"status": status, "files": payload}
            if status == "success":
                self.data[question_name] = payload

        event = UploadEvent(question=question, files=list(files), callback=callback)
        await self.channel(ON_UPLOAD_FILES).fire(self, event)
        return event

    async def complete(self) -> None:
        self.state = "completing"
        await self.channel(ON_COMPLETE).fire(self)
        self.state = "completed"

    def destroy(self) -> None:
        self.destroyed = True
        self.state = "destroyed"


__all__ = [
    "CHANNEL_NAMES",
    "ON_UPDATE_QUESTION_CSS_CLASSES",
    "ON_UPLOAD_FILES",
    "ON_COMPLETE",
    "ON_VALUE_CHANGED",
    "ON_CURRENT_PAGE_CHANGED",
    "ON_STARTED",
    "ChannelNotFoundError",
    "EventChannel",
    "Question",
    "FileBlob",
    "UploadEvent",
    "CssUpdate",
    "FormInstance",
]
