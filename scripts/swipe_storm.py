"""Swipe storm: hammer POST /swipe with concurrent reciprocal right-swipes.

Registers synthetic users, then for every pair fires both directions of a
right-swipe several times at once.  Each pair must end up with exactly one
match id, and that match must show up in both users' match lists.
Usage: python -m scripts.swipe_storm [--pairs 25] [--repeats 4] [--base-url http://localhost:8000]
"""
import argparse
import asyncio
import random
import statistics
import sys
import time
import uuid
from typing import Any

import httpx


DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_PAIRS = 25
DEFAULT_REPEATS = 4

LOCATIONS = ["London", "Manchester", "Edinburgh", "Bristol"]


async def register_user(client: httpx.AsyncClient, base_url: str, index: int) -> int | None:
    """Register one synthetic user and return its id."""
    tag = uuid.uuid4().hex[:8]
    payload = {
        "email": f"storm_{index}_{tag}@test.com",
        "username": f"storm_{index}_{tag}",
        "gender": random.choice(["male", "female"]),
        "location": random.choice(LOCATIONS),
    }
    try:
        resp = await client.post(f"{base_url}/register", json=payload)
    except httpx.HTTPError as e:
        print(f"  [ERROR] User {index}: {e}")
        return None
    if resp.status_code != 201:
        print(f"  [WARN] User {index}: status {resp.status_code}")
        return None
    return resp.json()["userId"]


async def swipe_right(
    client: httpx.AsyncClient,
    base_url: str,
    swiper_id: int,
    target_id: int,
    timings: list[float],
) -> dict[str, Any] | None:
    t0 = time.monotonic()
    try:
        resp = await client.post(
            f"{base_url}/swipe",
            json={"swiperId": swiper_id, "targetId": target_id, "direction": "right"},
        )
    except httpx.HTTPError as e:
        print(f"  [ERROR] Swipe {swiper_id}->{target_id}: {e}")
        return None
    finally:
        timings.append(time.monotonic() - t0)
    if resp.status_code != 200:
        print(f"  [WARN] Swipe {swiper_id}->{target_id}: status {resp.status_code}")
        return None
    return resp.json()


async def storm_pair(
    client: httpx.AsyncClient,
    base_url: str,
    a: int,
    b: int,
    repeats: int,
    timings: list[float],
) -> set[int]:
    """Fire ``repeats`` swipes in each direction at once; return the match ids seen."""
    calls = []
    for _ in range(repeats):
        calls.append(swipe_right(client, base_url, a, b, timings))
        calls.append(swipe_right(client, base_url, b, a, timings))
    random.shuffle(calls)
    outcomes = await asyncio.gather(*calls)
    return {o["matchId"] for o in outcomes if o and o.get("matched")}


async def list_match_partners(client: httpx.AsyncClient, base_url: str, user_id: int) -> dict[int, int]:
    """Map partner id to match id for ``user_id``."""
    resp = await client.get(f"{base_url}/matches", params={"userId": user_id})
    resp.raise_for_status()
    return {row["other_id"]: row["match_id"] for row in resp.json()}


async def run_storm(base_url: str, pairs: int, repeats: int) -> dict[str, Any]:
    print(f"\n{'='*60}")
    print(f"Swipe storm: {pairs} pairs x {repeats * 2} concurrent swipes")
    print(f"Target: {base_url}")
    print(f"{'='*60}\n")

    results: dict[str, Any] = {
        "pairs": pairs,
        "pairs_checked": 0,
        "violations": [],
        "timings": {"register": [], "swipe": []},
    }

    async with httpx.AsyncClient(timeout=30.0) as client:
        print(f"[1/3] Registering {pairs * 2} users...")
        user_ids = []
        for i in range(pairs * 2):
            t0 = time.monotonic()
            uid = await register_user(client, base_url, i)
            results["timings"]["register"].append(time.monotonic() - t0)
            if uid is not None:
                user_ids.append(uid)
        print(f"  -> {len(user_ids)} users registered\n")

        couples = list(zip(user_ids[0::2], user_ids[1::2]))

        print(f"[2/3] Swiping {len(couples)} pairs...")
        seen: dict[tuple[int, int], set[int]] = {}
        for i, (a, b) in enumerate(couples):
            seen[(a, b)] = await storm_pair(
                client, base_url, a, b, repeats, results["timings"]["swipe"]
            )
            if (i + 1) % 10 == 0:
                print(f"  Swiped {i + 1}/{len(couples)} pairs")
        print()

        print("[3/3] Verifying one match per pair...")
        for (a, b), match_ids in seen.items():
            results["pairs_checked"] += 1
            if len(match_ids) != 1:
                results["violations"].append(f"pair {a}/{b}: match ids {sorted(match_ids)}")
                continue
            (match_id,) = match_ids
            from_a = (await list_match_partners(client, base_url, a)).get(b)
            from_b = (await list_match_partners(client, base_url, b)).get(a)
            if from_a != match_id or from_b != match_id:
                results["violations"].append(
                    f"pair {a}/{b}: swipe said {match_id}, lists say {from_a}/{from_b}"
                )

    print(f"\n{'='*60}")
    print("SWIPE STORM RESULTS")
    print(f"{'='*60}")
    print(f"Pairs checked: {results['pairs_checked']}/{pairs}")
    print(f"Violations:    {len(results['violations'])}")

    for phase, timings in results["timings"].items():
        if timings:
            print(f"\n{phase} latency:")
            print(f"  mean:   {statistics.mean(timings) * 1000:.1f}ms")
            print(f"  median: {statistics.median(timings) * 1000:.1f}ms")
            print(f"  p95:    {sorted(timings)[int(len(timings) * 0.95)] * 1000:.1f}ms")
            print(f"  max:    {max(timings) * 1000:.1f}ms")

    for v in results["violations"][:10]:
        print(f"  - {v}")

    print(f"\n{'='*60}\n")
    return results


def main():
    parser = argparse.ArgumentParser(description="Concurrent reciprocal swipe check")
    parser.add_argument("--pairs", type=int, default=DEFAULT_PAIRS, help="Number of user pairs")
    parser.add_argument("--repeats", type=int, default=DEFAULT_REPEATS, help="Swipes per direction per pair")
    parser.add_argument("--base-url", type=str, default=DEFAULT_BASE_URL, help="API base URL")
    args = parser.parse_args()

    results = asyncio.run(run_storm(args.base_url, args.pairs, args.repeats))

    if results["violations"]:
        print(f"FAIL: {len(results['violations'])} pair(s) broke the one-match rule")
        sys.exit(1)
    if results["pairs_checked"] < results["pairs"]:
        print(f"FAIL: only {results['pairs_checked']}/{results['pairs']} pairs could be set up")
        sys.exit(1)
    print("PASS: every pair resolved to a single match")


if __name__ == "__main__":
    main()
