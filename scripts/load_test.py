"""Async load generator for `POST /create-payment-intent`.

Every accepted request creates a payment intent at Stripe, so the script
refuses to run when the server hands out a live publishable key unless
`--allow-live` is given. A share of requests can carry below-minimum amounts
to exercise the validation path, which never reaches Stripe.
"""

import argparse
import asyncio
import random
import statistics
import time
from collections import Counter
from uuid import uuid4

import httpx


async def server_mode(client: httpx.AsyncClient, base_url: str) -> str:
    """Infer live/test from the publishable key the server exposes."""

    resp = await client.get(f"{base_url}/get-stripe-key")
    resp.raise_for_status()
    key = resp.json().get("publishableKey") or ""
    return "live" if key.startswith("pk_live_") else "test"


async def send_one(client: httpx.AsyncClient, base_url: str, invalid: bool, order_idx: int):
    """Send one request and return (outcome, latency_ms)."""

    amount = random.randint(1, 49) if invalid else random.randint(50, 25000)
    payload = {"amount": amount, "currency": "gbp", "metadata": {"order_id": f"load-{order_idx}"}}
    started = time.perf_counter()
    try:
        resp = await client.post(
            f"{base_url}/create-payment-intent",
            json=payload,
            headers={"x-correlation-id": str(uuid4())},
        )
    except httpx.HTTPError as exc:
        return f"transport:{type(exc).__name__}", (time.perf_counter() - started) * 1000
    latency = (time.perf_counter() - started) * 1000
    if resp.status_code == 200:
        return "created", latency
    error = resp.json().get("error", "") if resp.headers.get("content-type", "").startswith("application/json") else ""
    kind = "invalid_amount" if error.startswith("Invalid amount") else "error"
    return f"{resp.status_code}:{kind}", latency


def pct(values, p):
    if not values:
        return 0.0
    idx = min(len(values) - 1, max(0, int((p / 100.0) * len(values)) - 1))
    return sorted(values)[idx]


async def run(total: int, concurrency: int, base_url: str, invalid_share: float, allow_live: bool) -> int:
    sem = asyncio.Semaphore(concurrency)
    outcomes: Counter[str] = Counter()
    latencies: dict[str, list[float]] = {}

    async with httpx.AsyncClient(timeout=10.0) as client:
        mode = await server_mode(client, base_url)
        if mode == "live" and not allow_live:
            print("server is in live mode; pass --allow-live to create real payment intents")
            return 2

        async def worker(i: int):
            async with sem:
                return await send_one(client, base_url, random.random() < invalid_share, i)

        tasks = [asyncio.create_task(worker(i)) for i in range(total)]
        for task in asyncio.as_completed(tasks):
            outcome, latency = await task
            outcomes[outcome] += 1
            latencies.setdefault(outcome, []).append(latency)

    print(f"mode={mode} total={total}")
    for outcome, count in outcomes.most_common():
        lats = latencies[outcome]
        print(
            f"{outcome:<28} count={count:<6} share={count / total * 100:6.2f}% "
            f"p50_ms={pct(lats, 50):.2f} p95_ms={pct(lats, 95):.2f} avg_ms={statistics.mean(lats):.2f}"
        )
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--total", type=int, default=200)
    parser.add_argument("--concurrency", type=int, default=20)
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("--invalid-share", type=float, default=0.1)
    parser.add_argument("--allow-live", action="store_true")
    args = parser.parse_args()
    raise SystemExit(
        asyncio.run(run(args.total, args.concurrency, args.base_url, args.invalid_share, args.allow_live))
    )
