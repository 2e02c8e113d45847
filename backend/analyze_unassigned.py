#!/usr/bin/env python3
"""Report who was left out of an event's circles, and why that is likely.

Usage: python analyze_unassigned.py <event_id>
"""

import argparse
import sys
from collections import Counter

from sqlmodel import Session

from dinner_circles.database import session_scope
from dinner_circles.services.errors import EventNotFound
from dinner_circles.services.matching_service import get_matching_pool, get_matching_results


def analyze(session: Session, event_id: int) -> int:
    pool = get_matching_pool(session, event_id)
    circles = get_matching_results(session, event_id)

    placed = {user_id for c in circles for user_id in c.member_ids}
    in_circle_of = {m.user_id: c.name for c in circles for m in c.members}
    unassigned = [e for e in pool if e.user_id not in placed]

    print(f"Opt-ins: {len(pool)}")
    print(f"Circles: {len(circles)}")
    print(f"Placed: {len(placed)}")
    print(f"Unassigned: {len(unassigned)}")
    print()

    sizes = Counter(len(c.members) for c in circles)
    print("=== Circle sizes ===")
    for size in sorted(sizes):
        print(f"  {size} members: {sizes[size]} circles")

    if not unassigned:
        return 0

    print()
    print("=== Unassigned opt-ins ===")
    for entry in unassigned:
        name = entry.profile.name if entry.profile else "?"
        if entry.partner_id is not None and entry.partner_id in placed:
            reason = f"partner {entry.partner_id} placed in {in_circle_of[entry.partner_id]}"
        elif not circles:
            reason = "matching not run yet"
        else:
            reason = "remainder below overflow floor"
        print(f"  user={entry.user_id} ({name}) partner={entry.partner_id} | {reason}")

    return len(unassigned)


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("event_id", type=int)
    args = parser.parse_args()

    with session_scope() as session:
        try:
            analyze(session, args.event_id)
        except EventNotFound as e:
            print(f"Error: {e.message}")
            sys.exit(1)


if __name__ == "__main__":
    main()
