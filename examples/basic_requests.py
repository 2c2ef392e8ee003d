"""
Basic Requests
==============

Demonstrates the builder chain for every method: get, post, put, patch, delete.
Each builder is used once; ``.send()`` returns a future that is awaited.
"""

import anyio

import httper


async def main() -> None:
    async with httper.HttperClient() as client:
        # ── GET ──────────────────────────────────────────────────────────
        async with client.get("https://httpbin.org/get").send() as response:
            print(f"GET    → {response.status_code} {response.reason_phrase}")
            print(f"  URL:          {response.url}")
            print(f"  HTTP version: {response.http_version}")
        print()

        # ── POST with raw bytes ──────────────────────────────────────────
        body = await (
            client.post("https://httpbin.org/post")
            .payload(b'{"name": "Bumblebee"}')
            .send()
            .json()
        )
        print(f"POST   → body echoed: {body['data']}")
        print()

        # ── PUT / PATCH ──────────────────────────────────────────────────
        for builder in (
            client.put("https://httpbin.org/put").payload("updated payload"),
            client.patch("https://httpbin.org/patch").payload("partial update"),
        ):
            async with builder.send() as response:
                print(f"{builder.method:<6} → {response.status_code}")
        print()

        # ── DELETE without a payload sends Content-Length: 0 ─────────────
        echoed = await client.delete("https://httpbin.org/delete").send().json()
        print(f"DELETE → Content-Length: {echoed['headers'].get('Content-Length')}")


if __name__ == "__main__":
    anyio.run(main)
