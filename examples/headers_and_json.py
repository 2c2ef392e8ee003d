"""
Headers and JSON
================

Default headers are set once on the client and merged under the headers of
each request.  Names match case-insensitively and the request's value wins.
``.json(T)`` validates the body into any type pydantic understands.
"""

import dataclasses

import anyio
import pydantic

import httper


@dataclasses.dataclass
class Slideshow:
    author: str
    title: str


class SlideshowDocument(pydantic.BaseModel):
    slideshow: Slideshow


async def main() -> None:
    async with httper.HttperClient(
        {"Accept": "application/json"}, user_agent="examples/1.0"
    ) as client:
        print(f"Client defaults: {dict(client.headers)}")

        # ── Per-request headers override the defaults ────────────────────
        echoed = await (
            client.get("https://httpbin.org/headers")
            .headers({"ACCEPT": "text/plain", "X-Request-Id": "abc-123"})
            .send()
            .json()
        )
        for name, value in sorted(echoed["headers"].items()):
            print(f"  {name}: {value}")
        print()

        # ── Typed decoding ───────────────────────────────────────────────
        document = await client.get("https://httpbin.org/json").send().json(SlideshowDocument)
        print(f"Slideshow {document.slideshow.title!r} by {document.slideshow.author}")

        # ── The merge itself is a pure function ──────────────────────────
        merged = httper.merge_headers({"User-Agent": "a", "Accept": "*/*"}, {"user-agent": "b"})
        print(f"Merged: {dict(merged)}")


if __name__ == "__main__":
    anyio.run(main)
