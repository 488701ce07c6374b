"""Host view owning one form instance for its lifetime.

`render()` may be called any number of times with new props. The caller's
handler map and completion callback are refreshed on every render; the
subscriptions themselves are rebuilt (dispose then bind) only when the CSS
map, the upload endpoint or the set of handler names changes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from survey_relay.client.event_binder import BuiltinHandlers, CompletionCallback, DisposeHandle, HandlerRef, bind
from survey_relay.client.form_engine import FormInstance

logger = logging.getLogger(__name__)


class SurveyView:
    def __init__(
        self,
        schema: Optional[Mapping[str, Any]] = None,
        *,
        upload_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.form = FormInstance(schema)
        self.ref = HandlerRef()
        self._upload_transport = upload_transport
        self._schema: Optional[Mapping[str, Any]] = schema
        self._binding_key: Optional[tuple] = None
        self._dispose: Optional[DisposeHandle] = None

    def render(
        self,
        schema: Optional[Mapping[str, Any]] = None,
        *,
        css_classes: Optional[Mapping[str, str]] = None,
        attributes: Optional[Mapping[str, Any]] = None,
        on_complete: Optional[CompletionCallback] = None,
        upload_api_url: Optional[str] = None,
        **handlers: Any,
    ) -> FormInstance:
        if self.form.destroyed:
            raise RuntimeError("cannot render an unmounted survey view")

        # Schema may arrive after the first render
        if schema and schema is not self._schema:
            self.form.from_json(schema)
            self._schema = schema

        self.ref.update(handlers, on_complete)

        css = dict(css_classes or {})
        key = (tuple(sorted(css.items())), upload_api_url, frozenset(handlers))
        if key != self._binding_key:
            if self._dispose is not None:
                self._dispose()
            for name, value in (attributes or {}).items():
                setattr(self.form, name, value)
            self._dispose = bind(
                self.form,
                BuiltinHandlers(css_classes=css, upload_api_url=upload_api_url, upload_transport=self._upload_transport),
                self.ref,
            )
            self._binding_key = key
        return self.form

    def unmount(self) -> None:
        if self._dispose is not None:
            self._dispose()
            self._dispose = None
        self._binding_key = None
        self.form.destroy()

    @property
    def bound(self) -> Dict[str, int]:
        return {name: len(channel) for name, channel in self.form.channels.items()}


__all__ = ["SurveyView"]
