"""Attach built-in and caller-supplied handlers to a live form.

`bind()` subscribes the built-in handlers (CSS class overrides, upload
proxying when an endpoint is configured, completion) and one forwarding
handler per caller-supplied channel name, and returns a `DisposeHandle`
that removes exactly those subscriptions.

Caller handlers are reached through a `HandlerRef`: the forwarding handler
looks up the current function on every dispatch, so the caller can swap
handler functions between renders without re-subscribing.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

import httpx

from survey_relay.client.form_engine import (
    ON_COMPLETE,
    ON_UPDATE_QUESTION_CSS_CLASSES,
    ON_UPLOAD_FILES,
    CssUpdate,
    EventChannel,
    FormInstance,
    Handler,
)
from survey_relay.client.upload_proxy import UploadProxy

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[FormInstance], Optional[Awaitable[Any]]]


class HandlerRef:
    """Mutable slot holding the caller's latest handlers."""

    def __init__(
        self,
        handlers: Optional[Mapping[str, Any]] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        self.handlers: Dict[str, Any] = dict(handlers or {})
        self.on_complete = on_complete

    def update(self, handlers: Mapping[str, Any], on_complete: Optional[CompletionCallback]) -> None:
        self.handlers = dict(handlers)
        self.on_complete = on_complete


@dataclass
class BuiltinHandlers:
    css_classes: Mapping[str, str] = field(default_factory=dict)
    upload_api_url: Optional[str] = None
    upload_transport: Optional[httpx.AsyncBaseTransport] = None


class DisposeHandle:
    """Removes every subscription made by one `bind()` call.

    Calling it again is a no-op.
    """

    def __init__(self, bindings: List[Tuple[EventChannel, Handler]], unknown_channels: List[str]) -> None:
        self.bindings = bindings
        self.unknown_channels = unknown_channels
        self.disposed = False

    def __call__(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        for channel, handler in self.bindings:
            if not channel.remove(handler):
                logger.warning("event_binder.remove_missing channel=%s", channel.name)
        logger.debug("event_binder.disposed bindings=%d", len(self.bindings))


def css_override_handler(css_classes: Mapping[str, str]) -> Handler:
    def handle_update_css(sender: FormInstance, options: CssUpdate) -> None:
        extra = css_classes.get(options.question.get_type())
        if extra:
            options.css_classes["root"] = f"{options.css_classes.get('root', '')} {extra}"

    return handle_update_css


def completion_handler(ref: HandlerRef) -> Handler:
    async def handle_complete(sender: FormInstance, options: Any = None) -> None:
        callback = ref.on_complete
        if callback is None:
            return
        outcome = callback(sender)
        if inspect.isawaitable(outcome):
            await outcome

    return handle_complete


def forwarding_handler(ref: HandlerRef, name: str) -> Handler:
    def forward(*args: Any) -> Any:
        current = ref.handlers.get(name)
        if callable(current):
            return current(*args)
        return None

    return forward


def bind(form: FormInstance, builtins: BuiltinHandlers, ref: HandlerRef) -> DisposeHandle:
    bindings: List[Tuple[EventChannel, Handler]] = []

    def subscribe(channel: EventChannel, handler: Handler) -> None:
        channel.add(handler)
        bindings.append((channel, handler))

    subscribe(form.channel(ON_UPDATE_QUESTION_CSS_CLASSES), css_override_handler(dict(builtins.css_classes)))
    if builtins.upload_api_url:
        proxy = UploadProxy(builtins.upload_api_url, transport=builtins.upload_transport)
        subscribe(form.channel(ON_UPLOAD_FILES), proxy.handle)
    subscribe(form.channel(ON_COMPLETE), completion_handler(ref))

    unknown: List[str] = []
    for name in ref.handlers:
        channel = form.get_channel(name)
        if channel is None:
            unknown.append(name)
            continue
        subscribe(channel, forwarding_handler(ref, name))
    if unknown:
        logger.warning("event_binder.unknown_channels names=%s", sorted(unknown))

    logger.debug("event_binder.bound bindings=%d", len(bindings))
    return DisposeHandle(bindings, unknown)


__all__ = [
    "BuiltinHandlers",
    "CompletionCallback",
    "DisposeHandle",
    "HandlerRef",
    "bind",
    "completion_handler",
    "css_override_handler",
    "forwarding_handler",
]
