#!/usr/bin/env python3
"""
Interactive local call harness (no telephony, no LLM planner).

Usage:
  python3 scripts/simulate_call.py

What it does:
- Keeps a stable session_id and ConversationState in the memory store
- Free text with no shortlist is treated as a day/time preference and offers slots
- Free text with a shortlist is matched against the offered options
- /book confirms the chosen option through the booking re-check and insert
"""

from __future__ import annotations

import os
import sys
import time
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from receptionist.application.exceptions import SchedulingError
from receptionist.application.use_cases.scheduling import SchedulingResult
from receptionist.application.utils.speech import options_text, human_date_time
from receptionist.application.utils.state_helpers import with_facts
from receptionist.core.config import settings
from receptionist.core.logging import configure_logging
from receptionist.wiring.dependencies import get_container


def _print_header(session_id: str) -> None:
    print("\nLocal Call Harness")
    print("-" * 60)
    print(f"session_id: {session_id}  timezone: {settings.BUSINESS_TIMEZONE}")
    print("Say a preference (e.g. 'tomorrow morning'), then pick an option.")
    print("Commands: /offer [pref], /book [n], /name <name>, /new, /state, /quit, /help")
    print("-" * 60)


def _print_result(result: SchedulingResult) -> None:
    print(f"\n--- {result.action} ---")
    if result.action == "offer_slots":
        print(" ".join(f"Option {i}: {text}." for i, text in enumerate(result.options, start=1)))
    elif result.action == "no_free_slots":
        print("No open time for that preference. Try other days or times.")
    elif result.action == "ambiguous_selection":
        hint = " (or press 1, 2, 3)" if result.use_dtmf else ""
        print(f"Didn't catch that. Say option one, two or three{hint}.")
        print(options_text(result.slots, _now()))
    elif result.action == "confirm" and result.slots:
        print(f"Chosen: {human_date_time(result.slots[0].start, _now())}. Type /book to confirm.")
    elif result.action == "booked" and result.booking:
        print(f"Booked {human_date_time(result.booking.slot.start, _now())} (event {result.booking.event_id}).")
    elif result.action == "slot_taken":
        print("That time just became unavailable. Ask for new options.")
    print("-" * 60)


def _now() -> datetime:
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE))


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    session_id = os.getenv("CALL_SESSION_ID", "local_call_1")
    container = get_container()
    use_case = container["use_case"]
    store = container["store"]
    _print_header(session_id)

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        state = store.get_state(session_id)
        cmd, _, arg = user_text.partition(" ")
        cmd = cmd.lower()

        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            _print_header(session_id)
            continue
        if cmd == "/new":
            store.delete_state(session_id)
            session_id = f"local_call_{int(time.time())}"
            print(f"New session_id: {session_id}")
            continue
        if cmd == "/state":
            print(state)
            continue
        if cmd == "/name":
            store.set_state(session_id, with_facts(state, {"name": arg.strip()}))
            continue

        try:
            if cmd == "/offer":
                result = use_case.offer_slots(state, arg or None)
            elif cmd == "/book":
                index = int(arg) - 1 if arg.strip().isdigit() else None
                result = use_case.book_slot(state, index)
            elif state.has_shortlist:
                result = use_case.select_slot(state, user_text)
            else:
                result = use_case.offer_slots(state, user_text)
        except SchedulingError as e:
            print(f"ERROR: {type(e).__name__}: {e}")
            continue

        store.set_state(session_id, result.updated_state)
        _print_result(result)


if __name__ == "__main__":
    main()
