"""Survey Relay: survey event wiring and submission fan-out.

Client-side wiring (form event binding, upload proxying) lives in
`survey_relay.client`; the submission pipeline in `survey_relay.logic`; HTTP
routes in `survey_relay.routes`.
"""

from __future__ import annotations

from survey_relay.main import create_app

__all__ = ["create_app"]
