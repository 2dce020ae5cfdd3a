"""Bulk maintenance passes over the objects of a bucket."""

from .compression import gunzip_bytes, gzip_bytes
from .eligibility import is_already_done, is_in_scope
from .passes import run_cache_header_pass, run_compression_pass
from .report import ObjectEvent, ObjectFailure, ObjectOutcome, RunReport

__all__ = [
    "ObjectEvent",
    "ObjectFailure",
    "ObjectOutcome",
    "RunReport",
    "gunzip_bytes",
    "gzip_bytes",
    "is_already_done",
    "is_in_scope",
    "run_cache_header_pass",
    "run_compression_pass",
]
