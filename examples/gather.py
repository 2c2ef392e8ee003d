"""
Example: httper.gather() / httper.gather_json() for concurrent batches

Every request is an independent exchange over the client's shared pool.
``max_concurrency`` caps how many are in flight at once.
"""

import time

import anyio

import httper


async def basic_gather() -> None:
    """Send 10 requests concurrently."""
    async with httper.HttperClient() as client:
        futures = [client.get("https://httpbin.org/delay/1").send().bytes() for _ in range(10)]

        start = time.perf_counter()
        bodies = await httper.gather(futures)
        elapsed = time.perf_counter() - start

        print(f"Sent {len(bodies)} requests in {elapsed:.2f}s")


async def gather_with_concurrency_limit() -> None:
    """Limit concurrency to 3 simultaneous requests and decode every body."""
    async with httper.HttperClient() as client:
        builders = [client.get(f"https://httpbin.org/get?id={i}") for i in range(20)]
        bodies = await httper.gather_json(builders, max_concurrency=3)
        print(f"Got {len(bodies)} JSON bodies, ids {[b['args']['id'] for b in bodies]}")


async def gather_with_failures() -> None:
    """Collect failures in place instead of raising the first one."""
    async with httper.HttperClient(timeout=2.0) as client:
        futures = [
            client.get("https://httpbin.org/json").send().json(),
            client.get("https://httpbin.org/delay/5").send().json(),
            client.get("https://httpbin.org/html").send().json(),
        ]
        for result in await httper.gather(futures, return_exceptions=True):
            status = type(result).__name__ if isinstance(result, httper.HttperError) else "ok"
            print(f"  {status}")


async def main() -> None:
    await basic_gather()
    await gather_with_concurrency_limit()
    await gather_with_failures()


if __name__ == "__main__":
    anyio.run(main)
