"""Journey phase classification from message volume."""

from typing import Optional

from leadsync.config import settings
from leadsync.schemas.context_schema import Phase


class PhaseClassifier:
    """Pure, total mapping from message count to Phase.

    Phase is recomputed on every request, so pruning history can move a
    lead back to an earlier phase.
    """

    def __init__(
        self,
        evaluation_threshold: Optional[int] = None,
        closing_threshold: Optional[int] = None,
    ) -> None:
        cfg = settings.phase
        self.evaluation_threshold = (
            cfg.evaluation_threshold if evaluation_threshold is None else evaluation_threshold
        )
        self.closing_threshold = (
            cfg.closing_threshold if closing_threshold is None else closing_threshold
        )

    def classify(self, message_count: int) -> Phase:
        if message_count < self.evaluation_threshold:
            return Phase.DISCOVERY
        if message_count < self.closing_threshold:
            return Phase.EVALUATION
        return Phase.CLOSING
