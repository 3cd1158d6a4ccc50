"""
Kitchen Simulation Script

Drives a running API through a busy kitchen: creates orders, moves them
through new -> in-progress -> ready from several concurrent "tablets",
and watches the queue board until the auto-advance scan has delivered
every ready order.

Requires the API in development mode.
Run from project root: python scripts/simulate.py
"""

import asyncio
import sys
import random
import time
import argparse
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 12


async def create_order(client: httpx.AsyncClient) -> dict[str, Any]:
    response = await client.post(f"{API_BASE_URL}/api/orders", json={})
    response.raise_for_status()
    return response.json()


async def kitchen_update(
    client: httpx.AsyncClient,
    order_id: int,
    payload: dict[str, Any],
) -> dict[str, Any]:
    response = await client.patch(
        f"{API_BASE_URL}/api/orders/{order_id}/kitchen-status",
        json=payload,
        timeout=10.0,
    )
    return {"status_code": response.status_code, "body": response.json()}


async def cook(client: httpx.AsyncClient, order: dict[str, Any]) -> dict[str, Any]:
    """One tablet working one order, with duplicate taps thrown in."""
    order_id = order["id"]
    await asyncio.sleep(random.uniform(0.1, 2.0))
    await kitchen_update(client, order_id, {
        "kitchen_status": "in-progress",
        "estimated_minutes": random.randint(1, 3),
    })

    await asyncio.sleep(random.uniform(1.0, 4.0))
    first = await kitchen_update(client, order_id, {"kitchen_status": "ready"})
    # Staff double-tap: must be a harmless no-op
    second = await kitchen_update(client, order_id, {"kitchen_status": "ready"})

    return {
        "order_number": order["order_number"],
        "ready_changed": first["body"].get("changed"),
        "duplicate_changed": second["body"].get("changed"),
    }


async def watch_board(client: httpx.AsyncClient, timeout: float) -> bool:
    """Poll the board until it is empty or ``timeout`` runs out."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        response = await client.get(f"{API_BASE_URL}/api/queue")
        rows = response.json()["rows"]
        summary = ", ".join(f"#{r['order_number']}:{r['kitchen_status']}:{r['wait_text']}" for r in rows)
        print(f"   [{time.strftime('%H:%M:%S')}] {len(rows)} on board  {summary[:100]}")
        if not rows:
            return True
        await asyncio.sleep(5)
    return False


async def run_simulation(total_orders: int, timeout: float) -> bool:
    print("=" * 70)
    print("KITCHEN SIMULATION")
    print("=" * 70)

    async with httpx.AsyncClient(timeout=30.0) as client:
        health = await client.get(f"{API_BASE_URL}/health")
        print(f"Health: {health.json().get('status')}")

        orders = [await create_order(client) for _ in range(total_orders)]
        print(f"Created {len(orders)} orders")

        results = await asyncio.gather(*(cook(client, o) for o in orders))
        duplicates = [r for r in results if r["duplicate_changed"]]
        print(f"All orders ready; duplicate taps that changed state: {len(duplicates)}")

        print("Waiting for auto-advance...")
        emptied = await watch_board(client, timeout)

    print("=" * 70)
    print("Board cleared" if emptied else "Board did not clear in time")
    print("=" * 70)
    return emptied and not duplicates


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Kitchen Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--timeout", type=float, default=300.0, help="Seconds to wait for the board to clear")
    args = parser.parse_args()

    ok = asyncio.run(run_simulation(args.orders, args.timeout))
    sys.exit(0 if ok else 1)
