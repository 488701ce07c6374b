"""Forward form upload events to a remote upload endpoint."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from survey_relay.client.form_engine import FileBlob, FormInstance, UploadEvent
from survey_relay.errors import UploadTransportError
from survey_relay.models.upload import UPLOADED_FILES

logger = logging.getLogger(__name__)


class UploadProxy:
    """POST all files of an upload event as one multipart request.

    Each event's callback is invoked exactly once: `("success", files)` with
    the parsed `[{fileId, content}]` body, or `("error",)` on any transport
    or parsing failure. Failed uploads are not retried.
    """

    def __init__(self, endpoint: str, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.endpoint = endpoint
        self.transport = transport

    async def handle(self, sender: FormInstance, event: UploadEvent) -> None:
        try:
            uploaded = await self._post(event.files)
        except Exception as exc:
            # Nothing escapes into the form; the callback reports the failure
            error = exc if isinstance(exc, UploadTransportError) else UploadTransportError(f"upload failed: {exc!r}")
            logger.error(
                "upload_proxy.error",
                extra={"endpoint": self.endpoint, "question": event.question.name, "error": str(error)},
                exc_info=not isinstance(exc, UploadTransportError),
            )
            event.callback("error")
            return
        logger.info("upload_proxy.success question=%s files=%d", event.question.name, len(uploaded))
        event.callback("success", uploaded)

    async def _post(self, files: List[FileBlob]) -> List[dict[str, Any]]:
        if not files:
            raise UploadTransportError("upload event carried no files")
        parts = [("files", (f.name, f.content, f.content_type)) for f in files]
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                resp = await client.post(self.endpoint, files=parts)
            resp.raise_for_status()
            items = UPLOADED_FILES.validate_json(resp.content)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UploadTransportError(f"upload request failed: {exc}") from exc
        except ValidationError as exc:
            raise UploadTransportError(f"unexpected upload response: {exc.error_count()} errors") from exc
        return [item.model_dump(by_alias=True) for item in items]


__all__ = ["UploadProxy"]
