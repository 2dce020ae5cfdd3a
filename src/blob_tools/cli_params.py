"""Shared CLI parameter definitions.

Reusable Typer annotations so every command spells its options the same
way. Use them directly in command signatures:

    @app.command()
    def my_command(
        access_key_id: AccessKeyIdOption = None,
        region_name: RegionOption = "us-east-1",
    ):
        pass
"""

from typing import Annotated, Optional

import typer

# S3 connection parameters
AccessKeyIdOption = Annotated[
    Optional[str], typer.Option("--access-key-id", help="AWS access key ID")
]
SecretAccessKeyOption = Annotated[
    Optional[str], typer.Option("--secret-access-key", help="AWS secret access key")
]
SessionTokenOption = Annotated[
    Optional[str], typer.Option("--session-token", help="AWS session token")
]
RegionOption = Annotated[str, typer.Option("--region", help="AWS region name")]
EndpointUrlOption = Annotated[
    Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
]
AwsProfileOption = Annotated[
    Optional[str], typer.Option("--aws-profile", help="AWS CLI profile name")
]

# Scope and policy parameters
ExtensionsOption = Annotated[
    list[str],
    typer.Option(
        "--extension",
        "-e",
        help="Extension to process, e.g. .js (repeat for several)",
    ),
]
SubpathOption = Annotated[
    Optional[str],
    typer.Option(
        "--subpath",
        help="Only touch objects under this folder (or this exact key)",
    ),
]
MaxAgeOption = Annotated[
    int, typer.Option("--max-age", help="Cache-Control max-age in seconds")
]

# Run parameters
SimulateOption = Annotated[
    bool,
    typer.Option("--simulate", help="Log what would change without writing"),
]
WorkersOption = Annotated[
    Optional[int],
    typer.Option("--workers", help="Number of parallel workers"),
]
