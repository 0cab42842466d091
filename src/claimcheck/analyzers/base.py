from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar

from ..models import SignalAdjustment


class ContextAnalyzer:
    """
    One independent signal on the fake-likelihood scale.

    Subclasses declare ``name`` and their ``minimum``/``maximum`` bounds and
    return a pre-clamped ``SignalAdjustment``. ``uses_evidence`` marks the
    analyzers that need the classified evidence URLs before they can start.
    """

    name: ClassVar[str] = "analyzer"
    minimum: ClassVar[float] = 0.0
    maximum: ClassVar[float] = 0.0
    uses_evidence: ClassVar[bool] = False

    async def analyze(self, text: str, urls: Sequence[str] = ()) -> SignalAdjustment:
        raise NotImplementedError

    def neutral(self) -> SignalAdjustment:
        return SignalAdjustment.neutral(self.name, self.minimum, self.maximum)

    def adjustment(self, raw: float, reasons: Sequence[str] = (), **details) -> SignalAdjustment:
        return SignalAdjustment.bounded(
            self.name,
            raw,
            self.minimum,
            self.maximum,
            reasons=tuple(reasons),
            details=details,
        )
