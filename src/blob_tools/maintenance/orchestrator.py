"""Fans listed objects out over a bounded worker pool.

Each object flows independently through scope check, already-done check,
transform and commit. Workers share nothing but the read-only specs and
the store client; the report and the sink are only touched by the thread
calling run().

Cancellation: once cancel_event is set no further objects are dispatched.
Objects already handed to a worker run to completion.
"""

import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Iterable, Optional

from blob_tools.core import get_logger, settings
from blob_tools.core.exceptions import (
    ConfigError,
    EnumerationError,
    ObjectProcessingError,
)
from blob_tools.maintenance.cache_control import commit_cache_control
from blob_tools.maintenance.compression import (
    commit_compressed,
    compress_object,
    target_key,
)
from blob_tools.maintenance.eligibility import (
    describe_object,
    is_already_done,
    is_in_scope,
)
from blob_tools.maintenance.report import (
    ObjectEvent,
    ObjectFailure,
    ObjectOutcome,
    ReportSink,
    RunReport,
    log_event,
)
from blob_tools.objectstorage.store import ObjectStore
from blob_tools.schemas import (
    ObjectDescriptor,
    PipelineKind,
    PolicySpec,
    RunMode,
    ScopeSpec,
)

logger = get_logger(__name__)


def process_object(
    descriptor: ObjectDescriptor,
    store: ObjectStore,
    scope: ScopeSpec,
    policy: PolicySpec,
    mode: RunMode,
    kind: PipelineKind,
) -> ObjectEvent:
    """Run one object through the pipeline.

    Raises:
        ObjectProcessingError: If describing, probing, reading or writing fails
    """
    if not is_in_scope(descriptor, scope):
        return ObjectEvent(ObjectOutcome.OUT_OF_SCOPE, descriptor.path)

    if kind is PipelineKind.COMPRESSION:
        # Listings carry no headers; only in-scope objects pay for a HEAD
        descriptor = describe_object(store, descriptor)

    if is_already_done(descriptor, scope, kind, store):
        return ObjectEvent(ObjectOutcome.ALREADY_DONE, descriptor.path)

    if kind is PipelineKind.COMPRESSION:
        target = target_key(descriptor, scope)
        payload = compress_object(store, descriptor)
        commit_compressed(store, descriptor, target, payload, policy, mode)
        target_path = f"/{descriptor.container}/{target}"
    else:
        commit_cache_control(store, descriptor, policy, mode)
        target_path = descriptor.path

    outcome = ObjectOutcome.SIMULATED if mode.simulate else ObjectOutcome.PROCESSED
    return ObjectEvent(outcome, descriptor.path, target=target_path)


def _process_isolated(
    descriptor: ObjectDescriptor,
    store: ObjectStore,
    scope: ScopeSpec,
    policy: PolicySpec,
    mode: RunMode,
    kind: PipelineKind,
) -> ObjectEvent:
    """process_object, with any failure turned into a FAILED event."""
    try:
        return process_object(descriptor, store, scope, policy, mode, kind)
    except ObjectProcessingError as e:
        failure = ObjectFailure(path=e.path, stage=e.stage, error=str(e))
    except Exception as e:
        logger.exception("Unexpected error processing object", path=descriptor.path)
        failure = ObjectFailure(
            path=descriptor.path, stage="process", error=f"{type(e).__name__}: {e}"
        )
    return ObjectEvent(ObjectOutcome.FAILED, descriptor.path, failure=failure)


def run(
    listing: Iterable[ObjectDescriptor],
    store: ObjectStore,
    scope: ScopeSpec,
    policy: PolicySpec,
    mode: RunMode,
    kind: PipelineKind,
    sink: Optional[ReportSink] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunReport:
    """Process every listed object and report the outcomes.

    Args:
        listing: Lazy sequence of descriptors; consumed as workers free up
        store: Store the objects live in
        scope: Which objects to touch
        policy: Cache policy to stamp
        mode: Simulate or write
        kind: Compression or cache-control pass
        sink: Called with each object's event, defaults to logging
        max_workers: Worker threads, defaults to settings.max_workers
        cancel_event: Stops dispatching new objects once set

    Returns:
        RunReport covering every object taken from the listing

    Raises:
        ConfigError: If max_workers is not positive
        EnumerationError: If the listing fails, after in-flight objects finish.
            Its report attribute holds the outcomes recorded so far.
    """
    workers = max_workers if max_workers is not None else settings.max_workers
    if workers < 1:
        raise ConfigError(f"max_workers must be at least 1, got {workers}")

    sink = sink or log_event
    report = RunReport()
    # At most this many objects are held in memory at once
    window = workers * 2
    pending: set[Future] = set()
    listing_failure: Optional[Exception] = None

    def emit(event: ObjectEvent) -> None:
        report.record(event)
        sink(event)

    def collect(done: Iterable[Future]) -> None:
        for future in done:
            emit(future.result())

    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix="blob-tools"
    ) as executor:
        iterator = iter(listing)
        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    report.cancelled = True
                    break

                try:
                    descriptor = next(iterator)
                except StopIteration:
                    break
                except Exception as e:
                    listing_failure = e
                    break

                # Pure check, done on the dispatching thread
                if not is_in_scope(descriptor, scope):
                    emit(ObjectEvent(ObjectOutcome.OUT_OF_SCOPE, descriptor.path))
                    continue

                if len(pending) >= window:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    collect(done)

                pending.add(
                    executor.submit(
                        _process_isolated, descriptor, store, scope, policy, mode, kind
                    )
                )
        finally:
            done, pending = wait(pending)
            collect(done)

    if report.cancelled:
        logger.warning("Run cancelled, stopped dispatching", **report.summary())

    if listing_failure is not None:
        logger.error("Listing failed, run aborted", **report.summary())
        if isinstance(listing_failure, EnumerationError):
            listing_failure.report = report
            raise listing_failure
        raise EnumerationError(
            f"Listing objects failed: {listing_failure}", report=report
        ) from listing_failure

    return report
