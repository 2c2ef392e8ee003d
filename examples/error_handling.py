"""
Error Handling
==============

Demonstrates httper's exception hierarchy.

Exception hierarchy:
    HttperError
    ├── InvalidURL             (raised when the future is awaited)
    ├── RequestAssemblyError   (bad header name or value, bad payload)
    ├── TransportError         (no usable response or body)
    │   ├── TimeoutException
    │   ├── NetworkError
    │   │   ├── ConnectError
    │   │   ├── ReadError
    │   │   ├── WriteError
    │   │   └── CloseError
    │   └── ProtocolError
    └── DecodeError            (a response arrived, its body did not fit)
"""

import dataclasses

import anyio

import httper


@dataclasses.dataclass
class Data:
    name: str


async def main() -> None:
    async with httper.HttperClient(timeout=2.0) as client:
        # ── A bad URL does not raise until the future is awaited ─────────
        future = client.get("htp//example.org").headers({"Accept": "*/*"}).send()
        try:
            await future
        except httper.InvalidURL as exc:
            print(f"InvalidURL:           {exc}")

        # ── Header values are checked before anything is sent ────────────
        try:
            await client.get("https://httpbin.org/get").headers({"X-Bad": "a\r\nb"}).send()
        except httper.RequestAssemblyError as exc:
            print(f"RequestAssemblyError: {exc}")

        # ── Status codes are not errors ──────────────────────────────────
        async with client.get("https://httpbin.org/status/404").send() as response:
            print(f"Status:               {response.status_code}")

        # ── Timeouts and network failures ────────────────────────────────
        try:
            await client.get("https://httpbin.org/delay/5").send()
        except httper.TimeoutException as exc:
            print(f"TimeoutException:     {exc!r}")

        try:
            await client.get("http://127.0.0.1:1/").send()
        except httper.TransportError as exc:
            print(f"{type(exc).__name__}:         {exc.request.url}")

        # ── DecodeError keeps the response that could not be decoded ─────
        try:
            await client.get("https://httpbin.org/html").send().json(Data)
        except httper.DecodeError as exc:
            print(f"DecodeError:          {exc}")
            print(f"  status:             {exc.response.status_code}")
            print(f"  content-type:       {exc.response.headers['content-type']}")


if __name__ == "__main__":
    anyio.run(main)
