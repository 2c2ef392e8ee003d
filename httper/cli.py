from __future__ import annotations

import json
import logging
import sys
import time

import anyio
import click
import httpx
from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from ._builders import PayloadBuilder
from ._client import METHODS_WITH_BODY, METHODS_WITHOUT_BODY, HttperClient
from ._exceptions import HttperError

logger = logging.getLogger("httper.cli")

TEXT_CONTENT_TYPES = (
    "text/",
    "application/json",
    "application/problem+json",
    "application/xml",
    "application/javascript",
)

STATUS_STYLES = {1: "cyan", 2: "green", 3: "yellow", 4: "red", 5: "bold red"}


def status_style(status_code: int) -> str:
    return STATUS_STYLES.get(status_code // 100, "bold red")


def is_binary(response: httpx.Response) -> bool:
    """Binary if the media type is not a known text type, or the body holds a NUL byte."""
    media_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    if media_type and not media_type.startswith(TEXT_CONTENT_TYPES):
        return True
    return b"\0" in response.content


def render_body(response: httpx.Response) -> tuple[str, bool]:
    """Return the printable body and whether it is indented JSON."""
    if is_binary(response):
        return f"<{len(response.content)} bytes of binary data>", False
    if "json" in response.headers.get("content-type", ""):
        try:
            return json.dumps(json.loads(response.text), indent=4, ensure_ascii=False), True
        except json.JSONDecodeError:
            pass
    return response.text, False


def format_request(request: httpx.Request) -> str:
    target = request.url.raw_path.decode("ascii")
    lines = [f"> {request.method} {target} HTTP/1.1"]
    lines.extend(f"> {name}: {value}" for name, value in request.headers.items())
    lines.append(">")
    return "\n".join(lines)


def format_response(response: httpx.Response) -> str:
    lines = [f"{response.http_version} {response.status_code} {response.reason_phrase}".rstrip()]
    lines.extend(f"{name}: {value}" for name, value in response.headers.items())
    lines.append("")
    if response.content:
        lines.append(render_body(response)[0])
    return "\n".join(lines)


def print_response(console: Console, response: httpx.Response) -> None:
    style = status_style(response.status_code)
    status = Text()
    status.append(f"{response.http_version} ", style="bold dim")
    status.append(str(response.status_code), style=f"bold {style}")
    if response.reason_phrase:
        status.append(f" {response.reason_phrase}", style=style)
    console.print(status)

    for name, value in response.headers.items():
        console.print(Text.assemble((name, "dim cyan"), (": ", "dim"), value))
    console.print()

    if not response.content:
        return
    body, is_json = render_body(response)
    if is_json:
        console.print(Syntax(body, "json", theme="monokai"))
    elif is_binary(response):
        console.print(body, style="dim", markup=False)
    else:
        console.print(body, markup=False, highlight=False)


def parse_header(header: str) -> tuple[str, str]:
    """Split a curl-style ``"Name: value"`` header."""
    name, sep, value = header.partition(":")
    if not sep:
        raise click.BadParameter(f"Invalid header format: '{header}'. Expected 'Key: Value'.")
    return name.strip(), value.strip()


async def fetch(
    url: str,
    method: str,
    headers: dict[str, str],
    body: bytes | None,
    timeout: float,
    follow_redirects: bool,
) -> httpx.Response:
    """Run one exchange and return the response with its body read."""
    async with HttperClient(timeout=timeout, follow_redirects=follow_redirects) as client:
        builder = client.request(method, url)
        if headers:
            builder = builder.headers(headers)
        if body is not None and isinstance(builder, PayloadBuilder):
            builder = builder.payload(body)
        async with builder.send() as response:
            await response.aread()
        return response


@click.command(help="Send an HTTP request and print the response.")
@click.argument("url")
@click.option("-m", "--method", default="GET", help="HTTP method.")
@click.option("-c", "--content", default=None, help="Raw request body.")
@click.option("-j", "--json-data", "json_body", default=None, help="JSON request body.")
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    help='Request header, e.g. -H "Authorization: Bearer token". Repeatable.',
)
@click.option("--timeout", default=5.0, show_default=True, help="Timeout in seconds.")
@click.option("--follow-redirects", is_flag=True, help="Follow 3xx responses.")
@click.option("-v", "--verbose", is_flag=True, help="Also print the request headers.")
@click.option("--timing", is_flag=True, help="Print the total request time.")
@click.option("--no-color", is_flag=True, help="Plain output.")
def main(
    url: str,
    method: str,
    content: str | None,
    json_body: str | None,
    headers: tuple[str, ...],
    timeout: float,
    follow_redirects: bool,
    verbose: bool,
    timing: bool,
    no_color: bool,
) -> None:
    method = method.upper()
    if method not in METHODS_WITHOUT_BODY | METHODS_WITH_BODY:
        raise click.BadParameter(f"Unsupported HTTP method: {method!r}", param_hint="--method")
    if method in METHODS_WITHOUT_BODY and (content is not None or json_body is not None):
        raise click.UsageError(f"A {method} request cannot carry a body.")

    request_headers = dict(parse_header(header) for header in headers)

    body = content.encode("utf-8") if content is not None else None
    if json_body is not None:
        try:
            body = json.dumps(json.loads(json_body)).encode("utf-8")
        except json.JSONDecodeError as exc:
            raise click.BadParameter(f"Invalid JSON: {exc}", param_hint="--json-data") from exc
        if not any(name.lower() == "content-type" for name in request_headers):
            request_headers["Content-Type"] = "application/json"

    rich_output = not no_color and sys.stdout.isatty()
    started = time.monotonic()
    try:
        response = anyio.run(fetch, url, method, request_headers, body, timeout, follow_redirects)
    except HttperError as exc:
        logger.debug("Request failed", exc_info=True)
        if rich_output:
            Console(stderr=True).print(f"[bold red]{type(exc).__name__}[/bold red]: {exc}")
        else:
            click.echo(f"{type(exc).__name__}: {exc}", err=True)
        sys.exit(1)
    elapsed_ms = (time.monotonic() - started) * 1000

    if rich_output:
        console = Console()
        if verbose:
            console.print(format_request(response.request), style="dim", markup=False)
        print_response(console, response)
        if timing:
            console.print(f"\n[dim]Total: {elapsed_ms:.1f}ms[/dim]")
    else:
        if verbose:
            click.echo(format_request(response.request))
        click.echo(format_response(response))
        if timing:
            click.echo(f"\nTotal: {elapsed_ms:.1f}ms")

    if response.status_code >= 300:
        sys.exit(1)
