import json
import typing

import pytest

pytest.importorskip("click")

import click
from click.testing import CliRunner

import httper
from httper.cli import parse_header


def splitlines(output: str) -> typing.Iterable[str]:
    return [line.strip() for line in output.splitlines()]


def remove_date_header(lines: typing.Iterable[str]) -> typing.Iterable[str]:
    return [line for line in lines if not line.startswith("date:")]


def test_help():
    runner = CliRunner()
    result = runner.invoke(httper.main, ["--help"])
    assert result.exit_code == 0
    assert "Send an HTTP request and print the response." in result.output


def test_get(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url])
    assert result.exit_code == 0
    assert remove_date_header(splitlines(result.output)) == [
        "HTTP/1.1 200 OK",
        "server: uvicorn",
        "content-type: text/plain",
        "transfer-encoding: chunked",
        "",
        "Hello, world!",
    ]


def test_json(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url + "json"])
    assert result.exit_code == 0
    assert '"name": "Bumblebee"' in result.output


def test_verbose(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url, "-v"])
    assert result.exit_code == 0
    lines = splitlines(result.output)
    assert "> GET / HTTP/1.1" in lines
    assert f"> user-agent: httper/{httper.__version__}" in lines


def test_headers(server):
    runner = CliRunner()
    result = runner.invoke(
        httper.main,
        [server.url + "echo_headers", "-H", "X-Custom: value", "-H", "User-Agent: cli-test"],
    )
    assert result.exit_code == 0
    body = json.loads(result.output.split("\n\n", 1)[1])
    assert body["x-custom"] == ["value"]
    assert body["user-agent"] == ["cli-test"]


def test_post_json(server):
    runner = CliRunner()
    result = runner.invoke(
        httper.main,
        [server.url + "echo_body", "-m", "POST", "-j", '{"name":  "Bumblebee"}'],
    )
    assert result.exit_code == 0
    lines = splitlines(result.output)
    assert "x-method: POST" in lines
    assert lines[-1] == '{"name": "Bumblebee"}'


def test_delete_with_content(server):
    runner = CliRunner()
    result = runner.invoke(
        httper.main, [server.url + "echo_body", "--method", "delete", "-c", "gone"]
    )
    assert result.exit_code == 0
    assert "x-method: DELETE" in splitlines(result.output)


def test_timing(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url, "--timing"])
    assert result.exit_code == 0
    assert "Total:" in result.output


def test_error_status_exits_non_zero(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url + "status/404"])
    assert result.exit_code == 1
    assert "HTTP/1.1 404 Not Found" in result.output


def test_connect_error():
    runner = CliRunner()
    result = runner.invoke(httper.main, ["http://127.0.0.1:1/"])
    assert result.exit_code == 1
    assert "ConnectError" in result.output


def test_invalid_url():
    runner = CliRunner()
    result = runner.invoke(httper.main, ["not-a-url"])
    assert result.exit_code == 1
    assert "InvalidURL" in result.output


def test_unsupported_method(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url, "-m", "TRACE"])
    assert result.exit_code == 2
    assert "Unsupported HTTP method" in result.output


def test_get_with_body(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url, "-c", "body"])
    assert result.exit_code == 2
    assert "cannot carry a body" in result.output


def test_invalid_json(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url, "-m", "POST", "-j", "{nope"])
    assert result.exit_code == 2
    assert "Invalid JSON" in result.output


def test_invalid_header(server):
    runner = CliRunner()
    result = runner.invoke(httper.main, [server.url, "-H", "no-colon"])
    assert result.exit_code == 2
    assert "Invalid header format" in result.output


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Accept: application/json", ("Accept", "application/json")),
        ("X-Empty:", ("X-Empty", "")),
        ("Authorization:  Bearer a:b ", ("Authorization", "Bearer a:b")),
    ],
)
def test_parse_header(header, expected):
    assert parse_header(header) == expected


def test_parse_header_without_colon():
    with pytest.raises(click.BadParameter):
        parse_header("Accept application/json")
