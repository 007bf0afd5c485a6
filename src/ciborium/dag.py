# dag.py
from __future__ import annotations

import heapq
from collections import Counter
from typing import Dict, List

from .model import Job


def topo_order(jobs: List[Job]) -> List[str]:
    """
    Order job names so every job comes after the jobs it `needs`.

    Ties are broken alphabetically, so the order is stable between runs.

    Raises:
        ValueError: duplicate job names, a `needs` entry naming an unknown
            job, or a dependency cycle.
    """
    dupes = sorted(n for n, c in Counter(j.name for j in jobs).items() if c > 1)
    if dupes:
        raise ValueError(f"Duplicate job names found: {dupes}")

    pending: Dict[str, set] = {}
    dependents: Dict[str, List[str]] = {j.name: [] for j in jobs}
    for j in jobs:
        deps = set(j.needs or [])
        unknown = sorted(deps - dependents.keys())
        if unknown:
            raise ValueError(f"Job '{j.name}' needs missing job(s) {unknown}")
        pending[j.name] = deps
        for dep in deps:
            dependents[dep].append(j.name)

    ready = [name for name, deps in pending.items() if not deps]
    heapq.heapify(ready)
    order: List[str] = []
    while ready:
        name = heapq.heappop(ready)
        order.append(name)
        for child in dependents[name]:
            pending[child].discard(name)
            if not pending[child]:
                heapq.heappush(ready, child)

    if len(order) != len(pending):
        stuck = sorted(n for n, deps in pending.items() if deps)
        raise ValueError(f"Dependency cycle between jobs: {stuck}")
    return order
