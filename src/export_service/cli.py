import json
from contextlib import nullcontext
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError

from iotdb_export import PipelineContext, Precision, transform_to_batch

from .app import ExportApp, iter_ndjson
from .settings import get_settings

app = typer.Typer(help="IoTDB export CLI (config checks, dry-run transforms, exports)")


def _load_settings():
    try:
        return get_settings()
    except ValidationError as e:
        logger.error(f"custom configuration failed validation: {e}")
        raise typer.Exit(code=1)


@app.command("check-config")
def check_config():
    """Validate the IoTDB settings and print them (password masked)."""
    settings = _load_settings()
    typer.echo(settings.model_dump_json(indent=2))
    logger.success("Configuration is valid")


@app.command("transform")
def transform(
    path: str = typer.Argument(..., help="NDJSON events file, '-' for stdin (.gz ok)"),
    prefix: str = typer.Option("", "--prefix", help="Device path prefix under root."),
    precision: Precision = typer.Option(Precision.MS, "--precision", help="s|ms|us|ns"),
):
    """Dry run: print the insertRecords batch each event would produce."""
    failed = 0
    for line in iter_ndjson(path):
        ok, result = transform_to_batch(PipelineContext(pipeline_id="dry-run"), line, prefix, precision)
        if ok:
            typer.echo(json.dumps(result.to_dict(), default=str))
        else:
            failed += 1
            logger.error(f"Failed to transform event: {result}")
    if failed:
        raise typer.Exit(code=1)


@app.command("export")
def export(
    path: str = typer.Argument(..., help="NDJSON events file, '-' for stdin (.gz ok)"),
    retry_file: Optional[str] = typer.Option(
        None, "--retry-file", help="Append retry payloads of failed events here (NDJSON)"
    ),
):
    """Export every event in an NDJSON file to IoTDB."""
    export_app = ExportApp(_load_settings())
    logger.info(f"Exporting events from {path}")

    with open(retry_file, "ab") if retry_file else nullcontext() as retry_out:
        summary = export_app.export(iter_ndjson(path), retry_out)

    typer.echo(json.dumps({"sent": summary.sent, "failed": summary.failed}, indent=2))
    if summary.failed:
        logger.error(f"{summary.failed} event(s) failed to export")
        raise typer.Exit(code=1)
    logger.success(f"Exported {summary.sent} event(s)")


if __name__ == "__main__":
    app()
