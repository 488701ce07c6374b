"""Client-side survey wiring: form engine boundary, upload proxy and event binding."""

from survey_relay.client.event_binder import BuiltinHandlers, DisposeHandle, HandlerRef, bind
from survey_relay.client.form_engine import ChannelNotFoundError, EventChannel, FileBlob, FormInstance, UploadEvent
from survey_relay.client.survey_view import SurveyView
from survey_relay.client.upload_proxy import UploadProxy

__all__ = [
    "BuiltinHandlers",
    "ChannelNotFoundError",
    "DisposeHandle",
    "EventChannel",
    "FileBlob",
    "FormInstance",
    "HandlerRef",
    "SurveyView",
    "UploadEvent",
    "UploadProxy",
    "bind",
]
