from __future__ import annotations

from typing import Annotated

import typer

SearchIdOption = Annotated[
    str | None,
    typer.Option(
        "--search-id",
        "-i",
        help="Advanced Computer Search ID (defaults to the stored default)",
    ),
]

RedactOption = Annotated[
    bool,
    typer.Option("--redact", help="Redact serial numbers and email addresses"),
]
