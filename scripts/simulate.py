"""
Concurrency Simulation Script

Fires concurrent orders and reviews at one cafe, then checks that every
order total matches its lines and that the cafe's rating aggregate
matches the reviews that were accepted.
Run from project root (API running, demo data seeded):
    python scripts/simulate.py --orders 50 --reviews 50
"""

import argparse
import asyncio
import os
import random
import sys
import time
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from caffio.client import CaffioAPIError, CaffioClient
from caffio.core.config import get_settings

import httpx


async def place_random_order(
    client: CaffioClient,
    customer_id: int,
    cafe_id: int,
    menu_items: list[dict[str, Any]],
) -> dict[str, Any]:
    picks = random.sample(menu_items, k=random.randint(1, min(3, len(menu_items))))
    lines = [{"menuItemId": item["id"], "quantity": random.randint(1, 3)} for item in picks]

    start_time = time.time()
    try:
        order = await client.create_order(
            customer_id,
            cafe_id,
            lines,
            order_type=random.choice(["DINE_IN", "TAKE_AWAY", "DELIVERY"]),
        )
    except (httpx.HTTPError, CaffioAPIError) as e:
        return {"success": False, "error": str(e)[:100], "time": round(time.time() - start_time, 3)}

    expected = sum(
        Decimal(str(line["price"])) * line["quantity"] for line in order["items"]
    )
    return {
        "success": True,
        "consistent": abs(Decimal(str(order["total"])) - expected) < Decimal("0.005"),
        "total": order["total"],
        "time": round(time.time() - start_time, 3),
    }


async def post_random_review(client: CaffioClient, cafe_id: int, customer_id: int) -> dict[str, Any]:
    rating = random.randint(1, 5)
    try:
        await client.create_review(cafe_id, rating, text="Simulated review", customer_id=customer_id)
    except (httpx.HTTPError, CaffioAPIError) as e:
        return {"success": False, "error": str(e)[:100]}
    return {"success": True, "rating": rating}


async def run_simulation(base_url: str, num_orders: int, num_reviews: int) -> None:
    print("=" * 70)
    print("🔥 CONCURRENCY SIMULATION")
    print("=" * 70)
    print(f"🎯 Target: {base_url}")
    print(f"📋 Orders: {num_orders}   ⭐ Reviews: {num_reviews}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with CaffioClient(base_url, timeout=30.0) as client:
        cafes = await client.list_cafes()
        if not cafes:
            print("\n❌ No cafes found. Run: python scripts/seed.py")
            return

        cafe = cafes[0]
        menu_items = [item for menu in await client.list_menus(cafe["id"]) for item in menu["items"]]
        if not menu_items:
            print(f"\n❌ Cafe '{cafe['name']}' has no menu items")
            return

        customer = await client.customer_signup(
            f"sim-{uuid.uuid4().hex[:8]}@example.com", "simulate", name="Simulation"
        )
        before = await client.get_cafe(cafe["id"])

        start_time = time.time()
        order_results, review_results = await asyncio.gather(
            asyncio.gather(*[
                place_random_order(client, customer["id"], cafe["id"], menu_items)
                for _ in range(num_orders)
            ]),
            asyncio.gather(*[
                post_random_review(client, cafe["id"], customer["id"])
                for _ in range(num_reviews)
            ]),
        )
        total_time = round(time.time() - start_time, 2)

        after = await client.get_cafe(cafe["id"])
        reviews = await client.list_reviews(cafe["id"])

    placed = [r for r in order_results if r["success"]]
    inconsistent = [r for r in placed if not r["consistent"]]
    accepted = [r for r in review_results if r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Orders placed: {len(placed)}/{num_orders}")
    print(f"✅ Reviews accepted: {len(accepted)}/{num_reviews}")
    print(f"⏱️  Total Time: {total_time}s")

    if placed:
        times = [r["time"] for r in placed]
        print(f"\n📈 Order latency: avg {sum(times) / len(times):.3f}s, max {max(times):.3f}s")

    print("\n🔍 Consistency checks:")
    print(f"   Order totals matching their lines: {len(placed) - len(inconsistent)}/{len(placed)}")

    expected_count = before["ratingCount"] + len(accepted)
    mean = sum(r["rating"] for r in reviews) / len(reviews) if reviews else 0.0
    count_ok = after["ratingCount"] == expected_count == len(reviews)
    mean_ok = abs(after["ratingAvg"] - mean) < 1e-6
    print(f"   ratingCount {after['ratingCount']} (expected {expected_count}): {'✅' if count_ok else '❌'}")
    print(f"   ratingAvg {after['ratingAvg']:.4f} (mean {mean:.4f}): {'✅' if mean_ok else '❌'}")
    print("=" * 70)


def main() -> None:
    parser = argparse.ArgumentParser(description="Concurrent order/review simulation")
    parser.add_argument("--base-url", default=get_settings().api_base_url)
    parser.add_argument("--orders", type=int, default=50, help="Number of concurrent orders")
    parser.add_argument("--reviews", type=int, default=50, help="Number of concurrent reviews")
    args = parser.parse_args()

    asyncio.run(run_simulation(args.base_url, args.orders, args.reviews))


if __name__ == "__main__":
    main()
