"""Per-object events and the aggregate report of a maintenance pass."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from blob_tools.core import get_logger

logger = get_logger(__name__)


class ObjectOutcome(str, Enum):
    """How a single listed object was classified."""

    OUT_OF_SCOPE = "out_of_scope"
    ALREADY_DONE = "already_done"
    PROCESSED = "processed"
    SIMULATED = "simulated"
    FAILED = "failed"


@dataclass(frozen=True)
class ObjectFailure:
    """A failed object, with enough detail for a targeted re-run.

    Attributes:
        path: Container-qualified object path
        stage: Stage that failed (probe, read, write_body, set_properties, ...)
        error: Underlying error message
    """

    path: str
    stage: str
    error: str


@dataclass(frozen=True)
class ObjectEvent:
    """Outcome of one object, delivered to the reporting sink."""

    outcome: ObjectOutcome
    path: str
    target: Optional[str] = None
    failure: Optional[ObjectFailure] = None


ReportSink = Callable[[ObjectEvent], None]


def log_event(event: ObjectEvent) -> None:
    """Default sink: log each event through structlog."""
    if event.outcome is ObjectOutcome.FAILED and event.failure is not None:
        logger.error(
            "Object failed",
            path=event.path,
            stage=event.failure.stage,
            error=event.failure.error,
        )
    elif event.outcome is ObjectOutcome.ALREADY_DONE:
        logger.info("Skipping already processed object", path=event.path)
    elif event.outcome is ObjectOutcome.OUT_OF_SCOPE:
        logger.debug("Object out of scope", path=event.path)
    else:
        logger.info(
            "Object processed",
            path=event.path,
            target=event.target,
            simulated=event.outcome is ObjectOutcome.SIMULATED,
        )


@dataclass
class RunReport:
    """Outcome counts of a maintenance pass.

    Only the orchestrating thread records into a report.
    """

    processed: int = 0
    skipped_out_of_scope: int = 0
    skipped_already_done: int = 0
    failed: int = 0
    simulated: int = 0
    failures: list[ObjectFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return (
            self.processed
            + self.skipped_out_of_scope
            + self.skipped_already_done
            + self.failed
            + self.simulated
        )

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def record(self, event: ObjectEvent) -> None:
        if event.outcome is ObjectOutcome.PROCESSED:
            self.processed += 1
        elif event.outcome is ObjectOutcome.SIMULATED:
            self.simulated += 1
        elif event.outcome is ObjectOutcome.ALREADY_DONE:
            self.skipped_already_done += 1
        elif event.outcome is ObjectOutcome.OUT_OF_SCOPE:
            self.skipped_out_of_scope += 1
        else:
            self.failed += 1
            if event.failure is not None:
                self.failures.append(event.failure)

    def failed_paths(self) -> list[str]:
        """Paths to feed into a re-run limited to the failures."""
        return [failure.path for failure in self.failures]

    def summary(self) -> dict:
        return {
            "processed": self.processed,
            "simulated": self.simulated,
            "skipped_out_of_scope": self.skipped_out_of_scope,
            "skipped_already_done": self.skipped_already_done,
            "failed": self.failed,
            "cancelled": self.cancelled,
        }
