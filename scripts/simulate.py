"""
Conversation Simulation Script

Drives many concurrent WhatsApp conversations through the simulation
webhook to check that sessions of different phones never interfere.
Run from project root: python scripts/simulate.py

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import random
import time
import argparse
from datetime import date, datetime, timedelta
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
RESTAURANT_ROUTE = "whatsapp:+14155238886"
TOTAL_CONVERSATIONS = 50

# Sample data for random conversations
FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson", "Taylor"]
STREETS = ["Main St", "Broadway", "5th Avenue", "Park Ave", "Madison Ave", "Lexington Ave", "Amsterdam Ave"]
COMMENTS = ["Great pizza!", "Service was a bit slow", "Loved the tiramisu", "Will come back"]
ISSUES = ["My order arrived cold", "Wrong drink delivered", "Waited 40 minutes for a table"]


def random_name() -> str:
    return f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}"


def random_phone() -> str:
    return f"555-{random.randint(100, 999)}-{random.randint(1000, 9999)}"


# =============================================================================
# CONVERSATION SCRIPTS
# =============================================================================

def order_script() -> list[str]:
    """Two items, then delivery or pickup."""
    messages = ["hi", "order"]
    messages += [str(random.randint(1, 3)), "1", str(random.randint(1, 3)), "yes"]
    messages += [str(random.randint(1, 3)), "1", str(random.randint(1, 3)), "no"]
    if random.random() < 0.5:
        messages += ["1", f"{random.randint(1, 999)} {random.choice(STREETS)}"]
    else:
        messages += ["2"]
    messages += [random_name(), random_phone(), "confirm"]
    return messages


def booking_script() -> list[str]:
    day = date.today() + timedelta(days=random.randint(1, 30))
    hour = random.randint(12, 21)
    return [
        "hi",
        "book",
        f"{day.isoformat()} {hour}:{random.choice(['00', '30'])} {random.randint(1, 8)}",
        random_name(),
        random_phone(),
        random.choice(["none", "Window seat please", "Birthday dinner"]),
        "confirm",
    ]


def feedback_script() -> list[str]:
    return [
        "hi",
        "feedback",
        f"{random.randint(1, 5)} {random.choice(COMMENTS)}",
        random_name(),
        random_phone(),
        "confirm",
    ]


def complaint_script() -> list[str]:
    return ["hi", "complaint", random.choice(ISSUES), random_name(), random_phone(), "confirm"]


SCRIPTS = {
    "order": order_script,
    "booking": booking_script,
    "feedback": feedback_script,
    "complaint": complaint_script,
}


# =============================================================================
# SIMULATION
# =============================================================================

async def run_conversation(
    client: httpx.AsyncClient,
    number: int,
    flow: str,
) -> dict[str, Any]:
    """Play one scripted conversation; success means the flow was committed."""
    phone = f"whatsapp:+1555{number:07d}"
    script = SCRIPTS[flow]()
    start_time = time.time()
    reply = ""

    try:
        for text in script:
            response = await client.post(
                f"{API_BASE_URL}/webhook/simulation",
                json={"from_phone": phone, "to_route": RESTAURANT_ROUTE, "body": text},
                timeout=30.0,
            )
            response.raise_for_status()
            data = response.json()
            reply = data["reply"]

        elapsed = round(time.time() - start_time, 3)
        committed = data["flow_type"] is None and reply.startswith("✅")
        return {
            "number": number,
            "flow": flow,
            "success": committed,
            "messages": len(script),
            "time": elapsed,
            "error": None if committed else reply[:100],
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "number": number,
            "flow": flow,
            "success": False,
            "messages": len(script),
            "time": elapsed,
            "error": str(e)[:100],
        }


async def run_simulation(flow: str = "mixed", count: int = TOTAL_CONVERSATIONS) -> dict[str, Any]:
    """
    Run `count` conversations concurrently.

    Args:
        flow: "order", "booking", "feedback", "complaint" or "mixed"
        count: Number of simulated customers
    """
    print("=" * 70)
    print("🔥 CONVERSATION SIMULATION - HIGH CONCURRENCY TEST")
    print("=" * 70)
    print(f"📋 Conversations: {count}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"🔧 Flow: {flow}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    flows = list(SCRIPTS) if flow == "mixed" else [flow]
    start_time = time.time()

    async with httpx.AsyncClient() as client:
        tasks = [
            run_conversation(client, i + 1, flows[i % len(flows)])
            for i in range(count)
        ]
        results = await asyncio.gather(*tasks)

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Completed Conversations: {len(successful)}/{count}")
    print(f"❌ Failed Conversations: {len(failed)}/{count}")
    print(f"⏱️  Total Time: {total_time}s")

    for name in flows:
        per_flow = [r for r in results if r["flow"] == name]
        done = len([r for r in per_flow if r["success"]])
        print(f"   {name}: {done}/{len(per_flow)}")

    if successful:
        total_messages = sum(r["messages"] for r in successful)
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Performance Metrics:")
        print(f"   Messages: {total_messages}")
        print(f"   Average Conversation: {avg_time}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")

    if failed:
        print(f"\n⚠️  Failed Conversation Details (showing first 5):")
        for f in failed[:5]:
            print(f"   #{f['number']} [{f['flow']}]: {f['error']}")

    print("=" * 70)

    return {
        "total": count,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def check_health() -> bool:
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(f"{API_BASE_URL}/health")
        except httpx.HTTPError as e:
            print(f"❌ Server not reachable: {e}")
            return False
    if response.status_code != 200:
        print(f"❌ Health check failed: {response.text}")
        return False
    data = response.json()
    print(f"✅ Status: {data.get('status')} (sessions: {data.get('active_sessions')})")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Conversation Simulation Script")
    parser.add_argument(
        "--flow",
        choices=["mixed", *SCRIPTS],
        default="mixed",
        help="Flow every simulated customer runs",
    )
    parser.add_argument("--count", type=int, default=TOTAL_CONVERSATIONS, help="Number of conversations")
    args = parser.parse_args()

    if not asyncio.run(check_health()):
        sys.exit(1)

    summary = asyncio.run(run_simulation(args.flow, args.count))
    sys.exit(0 if summary["failed"] == 0 else 1)
