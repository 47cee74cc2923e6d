"""
Shopper Simulation Script

Fires many concurrent shopping sessions at a running storefront API to
check that carts stay consistent under load.
Run from project root: python scripts/simulate.py

Each session adds random menu items (some twice, to exercise merging),
changes a quantity, removes a line, then compares the server's totals
with the totals expected from the requests it sent.

Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
import uuid
from decimal import Decimal
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_SESSIONS = 50

RESTAURANTS = [
    {"id": "r-1", "name": "Pappi's Pizza"},
    {"id": "r-2", "name": "Saigon Corner"},
    {"id": "r-3", "name": "Burger Barn"},
]
MENU_ITEMS = [
    {"menu_item_id": "m-1", "name": "Pepperoni Pizza", "price": "16.99", "restaurant_id": "r-1"},
    {"menu_item_id": "m-2", "name": "Margherita Pizza", "price": "14.99", "restaurant_id": "r-1"},
    {"menu_item_id": "m-3", "name": "Pho Bo", "price": "12.50", "restaurant_id": "r-2"},
    {"menu_item_id": "m-4", "name": "Spring Rolls", "price": "6.25", "restaurant_id": "r-2"},
    {"menu_item_id": "m-5", "name": "Classic Burger", "price": "11.00", "restaurant_id": "r-3"},
    {"menu_item_id": "m-6", "name": "French Fries", "price": "3.99", "restaurant_id": "r-3"},
]
SCHEDULE = {
    day: {"open": "09:00", "close": "22:00", "closed": day == "monday"}
    for day in ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
}


def restaurant_name(restaurant_id: str) -> str:
    return next(r["name"] for r in RESTAURANTS if r["id"] == restaurant_id)


def expected_total(quantities: dict[str, int]) -> Decimal:
    prices = {item["menu_item_id"]: Decimal(item["price"]) for item in MENU_ITEMS}
    return sum((prices[key] * qty for key, qty in quantities.items()), Decimal("0"))


# =============================================================================
# SESSION SIMULATION
# =============================================================================

async def run_session(client: httpx.AsyncClient, session_num: int) -> dict[str, Any]:
    """Drive one shopping session and check the final cart."""
    session_id = f"sim-{uuid.uuid4().hex[:12]}"
    base = f"{API_BASE_URL}/api/carts/{session_id}"
    quantities: dict[str, int] = {}
    start_time = time.time()

    try:
        for item in random.choices(MENU_ITEMS, k=random.randint(2, 6)):
            response = await client.post(
                f"{base}/items",
                json={**item, "restaurant_name": restaurant_name(item["restaurant_id"])},
                timeout=30.0,
            )
            response.raise_for_status()
            quantities[item["menu_item_id"]] = quantities.get(item["menu_item_id"], 0) + 1

        cart = response.json()
        line = random.choice(cart["lines"])
        new_quantity = random.randint(0, 4)
        response = await client.patch(
            f"{base}/items/{line['line_id']}",
            json={"quantity": new_quantity},
        )
        response.raise_for_status()
        if new_quantity > 0:
            quantities[line["menu_item_id"]] = new_quantity
        else:
            quantities.pop(line["menu_item_id"], None)

        cart = (await client.get(base)).json()
        elapsed = round(time.time() - start_time, 3)

        consistent = (
            Decimal(cart["total"]) == expected_total(quantities)
            and cart["item_count"] == sum(quantities.values())
            and len(cart["lines"]) == len(quantities)
        )
        await client.delete(base)

        return {
            "session_num": session_num,
            "success": consistent,
            "error": None if consistent else f"cart mismatch: {cart}",
            "total": cart["total"],
            "time": elapsed,
        }
    except (httpx.HTTPError, KeyError, ValueError) as e:
        return {
            "session_num": session_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_sessions: int = TOTAL_SESSIONS) -> dict[str, Any]:
    print("=" * 70)
    print("SHOPPER SIMULATION - CONCURRENT CARTS")
    print("=" * 70)
    print(f"Sessions: {num_sessions}")
    print(f"Target: {API_BASE_URL}")
    print("=" * 70)

    start_time = time.time()
    async with httpx.AsyncClient() as client:
        results = await asyncio.gather(
            *[run_session(client, i + 1) for i in range(num_sessions)]
        )
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print(f"\nConsistent sessions: {len(successful)}/{num_sessions}")
    print(f"Failed sessions: {len(failed)}/{num_sessions}")
    print(f"Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"Average session: {avg_time}s")

    if failed:
        print("\nFailed session details (showing first 5):")
        for f in failed[:5]:
            print(f"   Session #{f['session_num']}: {f.get('error', 'Unknown error')}")

    return {
        "total": num_sessions,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def run_preflight() -> bool:
    """Check health and restaurant status before the load run."""
    async with httpx.AsyncClient() as client:
        print("\n1. Health Check...")
        response = await client.get(f"{API_BASE_URL}/health")
        if response.status_code != 200:
            print(f"   Failed: {response.text}")
            return False
        data = response.json()
        print(f"   Status: {data.get('status')}")
        print(f"   Storage: {data.get('storage')}")
        print(f"   Delivery: {data.get('delivery_service')}")

        print("\n2. Restaurant Status...")
        response = await client.post(
            f"{API_BASE_URL}/api/restaurants/statuses",
            json={
                "restaurants": [
                    {"restaurant_id": r["id"], "operating_hours": SCHEDULE}
                    for r in RESTAURANTS
                ]
            },
        )
        if response.status_code != 200:
            print(f"   Failed: {response.text}")
            return False
        for status in response.json()["statuses"]:
            print(f"   {status['restaurant_id']}: {status['message']}")

    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Shopper Simulation Script")
    parser.add_argument("--sessions", type=int, default=TOTAL_SESSIONS, help="Number of sessions")
    parser.add_argument("--skip-preflight", action="store_true", help="Skip preflight checks")
    args = parser.parse_args()

    if not args.skip_preflight:
        if not asyncio.run(run_preflight()):
            print("\nPreflight checks failed. Is the API running?")
            sys.exit(1)

    summary = asyncio.run(run_simulation(num_sessions=args.sessions))
    sys.exit(0 if not summary["failed"] else 1)
