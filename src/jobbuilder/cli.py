# cli.py
from __future__ import annotations

import json
import logging
import os
import sys
import time
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import urljoin

import click

from jobbuilder import __version__
from jobbuilder.assembler import DEFAULT_DATACENTERS, assemble
from jobbuilder.decode import decode_job_spec
from jobbuilder.errors import ConfigError, DecodeError
from jobbuilder.logs import configure_logging
from jobbuilder.settings import Settings
from jobbuilder.ui.console import Console, get_console, set_console

logger = logging.getLogger(__name__)


def read_job_spec(path: str) -> str:
    console = get_console()
    spec_path = Path(path)
    if not spec_path.exists():
        console.print_error(
            "Job spec not found",
            f"Could not find job spec file: {path}",
        )
        sys.exit(1)
    return spec_path.read_text(encoding="utf-8")


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    envvar="DEBUG",
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.version_option(__version__)
@click.pass_context
def cli(ctx, debug):
    """CI job builder: turns build requests into Nomad batch jobs."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("--nomad-addr", envvar="NOMAD_ADDR", default=None, help="Address of the Nomad server")
@click.option("--nomad-token", envvar="NOMAD_TOKEN", default=None, help="Nomad ACL token")
@click.option("--host", envvar="HTTP_HOST", default=None, help="Interface to listen on")
@click.option("--port", envvar="HTTP_PORT", default=None, type=int, help="Port to accept requests on")
@click.option("--log-file", envvar="LOG_FILE", default=None, help="Path to JSON log file")
@click.pass_context
def serve(ctx, nomad_addr, nomad_token, host, port, log_file):
    """Run the build-job HTTP service."""
    import uvicorn

    from jobbuilder.cloud import create_app
    from jobbuilder.scheduler import NomadClient

    console = get_console()

    overrides = {
        "NOMAD_ADDR": nomad_addr,
        "NOMAD_TOKEN": nomad_token,
        "HTTP_HOST": host,
        "HTTP_PORT": str(port) if port is not None else None,
        "LOG_FILE": log_file,
    }
    environ = dict(os.environ)
    environ.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = Settings.from_env(environ)
    except ConfigError as e:
        console.print_error(
            "Invalid configuration",
            str(e),
            suggestion="Set NOMAD_ADDR or pass --nomad-addr:\n  jobbuilder serve --nomad-addr http://127.0.0.1:4646",
        )
        sys.exit(1)
    settings.debug = settings.debug or ctx.obj.get("debug", False)

    try:
        configure_logging(debug=settings.debug, log_file=settings.log_file)
    except OSError as e:
        console.print_error("Unable to open log file", str(e))
        sys.exit(1)

    logger.info("version: %s", __version__)

    scheduler = NomadClient(
        settings.nomad_addr,
        token=settings.nomad_token,
        timeout=settings.register_timeout,
    )
    app = create_app(settings, scheduler)

    console.print_server_started(
        version=__version__,
        host=settings.http_host,
        port=settings.http_port,
        nomad_addr=settings.nomad_addr,
    )
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_config=None)


@cli.command()
@click.argument("job_spec")
@click.option("--source-archive", required=True, help="Locator of the packaged source (e.g., s3://bucket/src.tar.gz)")
@click.option(
    "--datacenter",
    "datacenters",
    multiple=True,
    help="Datacenter to place the job in (repeatable, defaults to dc1)",
)
def render(job_spec, source_archive, datacenters):
    """Print the Nomad job a build request would register, without submitting it."""
    console = get_console()

    text = read_job_spec(job_spec)
    try:
        spec = decode_job_spec(text)
    except DecodeError as e:
        console.print_error(
            "Invalid job spec",
            f"Could not decode {job_spec}",
            details=[str(e)],
        )
        sys.exit(1)

    job = assemble(spec, source_archive, time.time, datacenters or DEFAULT_DATACENTERS)
    console.print_json(job.to_nomad())


@cli.command()
@click.argument("job_spec")
@click.option("--source-archive", required=True, help="Locator of the packaged source")
@click.option("--api", required=True, help="Job builder base URL (e.g., http://localhost:8080)")
def submit(job_spec, source_archive, api):
    """Send a build request to a running job builder."""
    console = get_console()

    text = read_job_spec(job_spec)

    base_url = api.rstrip("/")
    url = urljoin(base_url + "/", "build-job")

    console.print_debug(f"Posting build request to {url}")
    req_data = json.dumps({"job_spec": text, "source_archive": source_archive}).encode("utf-8")
    req = urllib.request.Request(
        url,
        data=req_data,
        headers={"Content-Type": "application/json"},
        method="POST",
    )

    try:
        with urllib.request.urlopen(req) as response:
            console.print_submitted(base_url, response.status)
    except urllib.error.HTTPError as e:
        hint = {
            400: "The job spec or envelope was rejected; run `jobbuilder render` to check it.",
            500: "The scheduler rejected the job; check the job builder logs.",
        }.get(e.code, f"Check the job builder at {base_url}.")
        console.print_error(
            "Build request failed",
            f"HTTP {e.code} {e.reason}",
            suggestion=hint,
        )
        sys.exit(1)
    except urllib.error.URLError as e:
        console.print_error(
            "Network error",
            f"Could not connect to {base_url}",
            details=[str(e.reason)],
            suggestion="Verify the URL is correct and the job builder is running.",
        )
        console.print_exception(e)
        sys.exit(1)


if __name__ == "__main__":
    cli()
