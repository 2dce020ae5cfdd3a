"""Command-line interface for blob-tools.

Commands:
    - compress: Gzip eligible objects, in place or into sibling objects
    - cache-control: Stamp a Cache-Control header on eligible objects
    - cors: Allow GET from any origin on a bucket

Targets are given as s3://bucket or s3://bucket/subpath.
"""

import signal
import threading
from contextlib import contextmanager
from typing import Annotated, Iterator, Optional

import typer

from . import __version__
from .cli_params import (
    AccessKeyIdOption,
    AwsProfileOption,
    EndpointUrlOption,
    ExtensionsOption,
    MaxAgeOption,
    RegionOption,
    SecretAccessKeyOption,
    SessionTokenOption,
    SimulateOption,
    SubpathOption,
    WorkersOption,
)
from .core.exceptions import EnumerationError
from .maintenance.report import RunReport
from .schemas import S3StorageConfig
from .unified import apply_cache_control, compress_container, configure_wildcard_cors

app = typer.Typer(
    name="blob-tools",
    help="Bulk compression and cache-header maintenance for S3 buckets.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"blob-tools {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    Blob-Tools: idempotent maintenance passes over S3 objects.
    """
    pass


@contextmanager
def _cancel_on_interrupt() -> Iterator[threading.Event]:
    """First Ctrl-C stops dispatching; in-flight objects still finish."""
    cancel = threading.Event()
    previous = signal.getsignal(signal.SIGINT)

    def _handler(signum, frame):
        typer.echo("Interrupted, finishing in-flight objects...", err=True)
        cancel.set()
        signal.signal(signal.SIGINT, previous)

    signal.signal(signal.SIGINT, _handler)
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGINT, previous)


def _print_report(report: RunReport, simulate: bool) -> None:
    if simulate:
        typer.echo("Simulation: no objects were written.")
    typer.echo(f"Processed: {report.processed:,}")
    if simulate:
        typer.echo(f"Would process: {report.simulated:,}")
    typer.echo(f"Skipped (out of scope): {report.skipped_out_of_scope:,}")
    typer.echo(f"Skipped (already done): {report.skipped_already_done:,}")
    typer.echo(f"Failed: {report.failed:,}")
    if report.cancelled:
        typer.echo("Run was cancelled before all objects were dispatched.")
    for failure in report.failures:
        typer.echo(f"  {failure.path} [{failure.stage}]: {failure.error}", err=True)


def _abort_with_partial_report(error: EnumerationError, simulate: bool) -> None:
    typer.echo(f"Error: {error}", err=True)
    if error.report is not None:
        typer.echo("Listing stopped early; objects handled before that:")
        _print_report(error.report, simulate)
    raise typer.Exit(1)


@app.command("compress")
def compress_cmd(
    path: Annotated[str, typer.Argument(help="s3://bucket or s3://bucket/subpath")],
    extensions: ExtensionsOption,
    max_age: MaxAgeOption = 0,
    in_place: Annotated[
        bool,
        typer.Option(
            "--in-place/--sibling",
            help="Overwrite originals, or write compressed siblings",
        ),
    ] = True,
    new_extension: Annotated[
        str,
        typer.Option("--new-extension", help="Suffix for sibling objects"),
    ] = ".gz",
    subpath: SubpathOption = None,
    simulate: SimulateOption = False,
    workers: WorkersOption = None,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """
    Gzip eligible objects and mark them Content-Encoding: gzip.

    Examples:
        blob-tools compress s3://site -e .js -e .css --max-age 3600
        blob-tools compress s3://site/assets -e .js --sibling --simulate
    """
    try:
        config = S3StorageConfig(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )

        with _cancel_on_interrupt() as cancel:
            report = compress_container(
                path=path,
                config=config,
                extensions=extensions,
                max_age_seconds=max_age,
                in_place=in_place,
                new_extension=new_extension,
                subpath=subpath,
                simulate=simulate,
                max_workers=workers,
                cancel_event=cancel,
            )

    except EnumerationError as e:
        _abort_with_partial_report(e, simulate)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    _print_report(report, simulate)
    if not report.ok:
        raise typer.Exit(1)


@app.command("cache-control")
def cache_control_cmd(
    path: Annotated[str, typer.Argument(help="s3://bucket or s3://bucket/subpath")],
    extensions: ExtensionsOption,
    max_age: MaxAgeOption = 0,
    subpath: SubpathOption = None,
    simulate: SimulateOption = False,
    workers: WorkersOption = None,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """
    Set Cache-Control: public, max-age=N on eligible objects.

    Examples:
        blob-tools cache-control s3://site -e .css -e .js --max-age 86400
    """
    try:
        config = S3StorageConfig(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )

        with _cancel_on_interrupt() as cancel:
            report = apply_cache_control(
                path=path,
                config=config,
                extensions=extensions,
                max_age_seconds=max_age,
                subpath=subpath,
                simulate=simulate,
                max_workers=workers,
                cancel_event=cancel,
            )

    except EnumerationError as e:
        _abort_with_partial_report(e, simulate)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    _print_report(report, simulate)
    if not report.ok:
        raise typer.Exit(1)


@app.command("cors")
def cors_cmd(
    path: Annotated[str, typer.Argument(help="s3://bucket")],
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """
    Replace the bucket's CORS rules with a single GET-from-anywhere rule.
    """
    try:
        config = S3StorageConfig(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )
        configure_wildcard_cors(path, config)
        typer.echo(f"✓ Wildcard GET CORS rule set on {path}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
