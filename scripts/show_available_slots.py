#!/usr/bin/env python3
"""Print the appointment slots that would be offered right now."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budgetease.appointments import fetch_available_slots, format_time_slot


def main(seed: Optional[int] = None) -> int:
    rng = np.random.default_rng(seed)
    slots = fetch_available_slots(rng=rng)
    if not slots:
        print("No slots available.")
        return 1

    for day_key, day in slots.items():
        times = sorted(slot.time for slot in day.slots)
        labels = ", ".join(format_time_slot(t) for t in times)
        print(f"{day.day_name:<10} {day_key}: {labels}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show currently offered appointment slots.')
    parser.add_argument('--seed', type=int, default=None, help='Seed for a repeatable selection')
    args = parser.parse_args()
    raise SystemExit(main(seed=args.seed))
