"""Entry points for the compression and cache-header passes."""

import threading
from typing import Optional

from blob_tools.core import get_logger, get_tracer
from blob_tools.maintenance import orchestrator
from blob_tools.maintenance.report import ReportSink, RunReport
from blob_tools.objectstorage.store import ObjectStore
from blob_tools.schemas import PipelineKind, PolicySpec, RunMode, ScopeSpec

logger = get_logger(__name__)
tracer = get_tracer(__name__)


def _run_pass(
    kind: PipelineKind,
    store: ObjectStore,
    container: str,
    scope: ScopeSpec,
    policy: PolicySpec,
    mode: RunMode,
    sink: Optional[ReportSink],
    max_workers: Optional[int],
    cancel_event: Optional[threading.Event],
) -> RunReport:
    logger.info(
        "Starting maintenance pass",
        kind=kind.value,
        bucket=container,
        extensions=sorted(scope.allowed_extensions),
        subpath=scope.subpath_prefix,
        in_place=scope.in_place,
        cache_control=policy.cache_control_header,
        simulate=mode.simulate,
    )

    with tracer.start_as_current_span(f"blob_tools.{kind.value}_pass") as span:
        span.set_attribute("blob_tools.bucket", container)
        span.set_attribute("blob_tools.simulate", mode.simulate)

        report = orchestrator.run(
            store.list_objects(container),
            store,
            scope,
            policy,
            mode,
            kind,
            sink=sink,
            max_workers=max_workers,
            cancel_event=cancel_event,
        )

        span.set_attribute("blob_tools.processed", report.processed)
        span.set_attribute("blob_tools.failed", report.failed)

    logger.info(
        "Maintenance pass completed", kind=kind.value, bucket=container, **report.summary()
    )
    return report


def run_compression_pass(
    store: ObjectStore,
    container: str,
    scope: ScopeSpec,
    policy: PolicySpec,
    mode: RunMode,
    sink: Optional[ReportSink] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunReport:
    """Gzip every eligible object not already compressed.

    In place, the original object is overwritten and marked gzip; otherwise
    a sibling at key + new_extension_suffix is created. Either way the
    target gets the source's Content-Type and the policy's Cache-Control.

    Raises:
        EnumerationError: If the container cannot be listed
    """
    return _run_pass(
        PipelineKind.COMPRESSION,
        store,
        container,
        scope,
        policy,
        mode,
        sink,
        max_workers,
        cancel_event,
    )


def run_cache_header_pass(
    store: ObjectStore,
    container: str,
    scope: ScopeSpec,
    policy: PolicySpec,
    mode: RunMode,
    sink: Optional[ReportSink] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunReport:
    """Stamp the policy's Cache-Control on every eligible object."""
    return _run_pass(
        PipelineKind.CACHE_CONTROL,
        store,
        container,
        scope,
        policy,
        mode,
        sink,
        max_workers,
        cancel_event,
    )
