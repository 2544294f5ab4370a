"""Live check: drive a /ws/session conversation against a running server.

Usage:
    uvicorn bimasathi.main:app --port 8000
    python live_session.py ws://localhost:8000/ws/session

Type answers at the prompt; an empty line picks the first quick reply,
"reset" starts over, "quit" exits.
"""

import asyncio
import json
import sys

import websockets


DEFAULT_URI = "ws://localhost:8000/ws/session"


def print_snapshot(session: dict) -> None:
    print("=" * 70)
    print(f"[SESSION] {session.get('session_id')}  phase={session.get('phase')}  busy={session.get('busy')}")
    print("=" * 70)

    for msg in session.get("messages", [])[-3:]:
        print(f"  {msg['role']:>9}: {msg['content']}")

    replies = session.get("quick_replies") or []
    if replies:
        print(f"\n  Quick replies: {' | '.join(replies)}")

    for rank, rec in enumerate(session.get("recommendations", []), start=1):
        policy, analysis = rec["policy"], rec["analysis"]
        print(f"\n  #{rank} {policy['policyName']} ({policy['insurerName']}): {analysis['matchScore']}% match")
        print(f"     {analysis['reasoning']}")
    print()


async def main(uri: str) -> None:
    async with websockets.connect(uri) as ws:
        await ws.send(json.dumps({"action": "start"}))
        latest: dict = {}

        while True:
            # Drain everything the server pushed for the last action
            try:
                while True:
                    raw = await asyncio.wait_for(ws.recv(), timeout=1.0)
                    data = json.loads(raw)
                    if data.get("type") == "session_snapshot":
                        latest = data["session"]
                        print_snapshot(latest)
                    else:
                        print(f"[SERVER] {data}")
            except asyncio.TimeoutError:
                pass

            if latest.get("busy"):
                continue

            answer = await asyncio.to_thread(input, "> ")
            answer = answer.strip()
            if answer == "quit":
                return
            if answer == "reset":
                await ws.send(json.dumps({"action": "reset"}))
                await ws.send(json.dumps({"action": "start"}))
                continue
            if not answer and latest.get("quick_replies"):
                await ws.send(json.dumps({"action": "quick_reply", "text": latest["quick_replies"][0]}))
                continue
            await ws.send(json.dumps({"action": "submit", "text": answer}))


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URI))
