"""Per-sink outcome of one submission."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from survey_relay.errors import SinkWriteError

DOCUMENT_STORE = "document_store"
SPREADSHEET = "spreadsheet"
OBJECT_STORE = "object_store"


@dataclass
class SinkOutcome:
    sink: str
    value: Any = None
    error: Optional[SinkWriteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SubmissionResult:
    """Mapping from sink name to its outcome, in attempt order.

    The aggregator records outcomes only; callers decide whether a partial
    result counts as success.
    """

    outcomes: Dict[str, SinkOutcome] = field(default_factory=dict)

    def record(self, outcome: SinkOutcome) -> None:
        self.outcomes[outcome.sink] = outcome

    def __getitem__(self, sink: str) -> SinkOutcome:
        return self.outcomes[sink]

    def __contains__(self, sink: object) -> bool:
        return sink in self.outcomes

    def __iter__(self) -> Iterator[str]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    def succeeded(self) -> List[str]:
        return [name for name, o in self.outcomes.items() if o.ok]

    def failed(self) -> List[str]:
        return [name for name, o in self.outcomes.items() if not o.ok]

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        for name, outcome in self.outcomes.items():
            if outcome.ok:
                body[name] = {"ok": True, "result": outcome.value}
            else:
                body[name] = {"ok": False, **outcome.error.to_dict()}  # type: ignore[union-attr]
        return body


__all__ = ["DOCUMENT_STORE", "SPREADSHEET", "OBJECT_STORE", "SinkOutcome", "SubmissionResult"]
