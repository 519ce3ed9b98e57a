"""Ordering engine: turns a set of actions into an execution plan.

Plan computation is pure. It never asks whether an action is already
satisfied; that happens in the execution driver.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .actions.base import Action
from .errors import CyclicDependency, DuplicateAction, UnknownAction, UnknownPrerequisite


@dataclass(frozen=True)
class ExecutionPlan:
    actions: Tuple[Action, ...]

    @property
    def ids(self) -> List[str]:
        return [a.action_id for a in self.actions]

    def __len__(self) -> int:
        return len(self.actions)

    def __iter__(self):
        return iter(self.actions)


def _index(actions: Sequence[Action]) -> Dict[str, Action]:
    by_id: Dict[str, Action] = {}
    for a in actions:
        if a.action_id in by_id:
            raise DuplicateAction(a.action_id)
        by_id[a.action_id] = a
    for a in actions:
        for dep in a.requires:
            if dep not in by_id:
                raise UnknownPrerequisite(a.action_id, dep)
    return by_id


def _closure(by_id: Dict[str, Action], roots: Iterable[str]) -> Set[str]:
    selected: Set[str] = set()
    stack = list(roots)
    while stack:
        aid = stack.pop()
        if aid in selected:
            continue
        if aid not in by_id:
            raise UnknownAction(aid)
        selected.add(aid)
        stack.extend(by_id[aid].requires)
    return selected


def _find_cycle(by_id: Dict[str, Action], remaining: Set[str]) -> List[str]:
    """Return one cycle among ``remaining`` as a closed path (first == last)."""

    WHITE, GREY, BLACK = 0, 1, 2
    color = {aid: WHITE for aid in remaining}
    path: List[str] = []

    def visit(aid: str) -> Optional[List[str]]:
        color[aid] = GREY
        path.append(aid)
        for dep in by_id[aid].requires:
            if dep not in remaining:
                continue
            if color[dep] == GREY:
                return path[path.index(dep):] + [dep]
            if color[dep] == WHITE:
                found = visit(dep)
                if found:
                    return found
        path.pop()
        color[aid] = BLACK
        return None

    for aid in sorted(remaining):
        if color[aid] == WHITE:
            found = visit(aid)
            if found:
                # Walk in dependency order: prerequisite first.
                return list(reversed(found))
    return sorted(remaining)


def build_plan(actions: Sequence[Action], only: Optional[Iterable[str]] = None) -> ExecutionPlan:
    """Topologically sort ``actions`` by their ``requires`` edges.

    Ties are broken by declaration order, so the same input always yields
    the same plan. ``only`` restricts the plan to the named actions plus
    everything they transitively require.
    """

    by_id = _index(actions)
    order = {a.action_id: i for i, a in enumerate(actions)}

    selected = set(by_id) if only is None else _closure(by_id, only)

    in_degree: Dict[str, int] = {aid: 0 for aid in selected}
    dependents: Dict[str, List[str]] = {aid: [] for aid in selected}
    for aid in selected:
        for dep in set(by_id[aid].requires):
            in_degree[aid] += 1
            dependents[dep].append(aid)

    ready = [(order[aid], aid) for aid, deg in in_degree.items() if deg == 0]
    heapq.heapify(ready)

    planned: List[Action] = []
    while ready:
        _, aid = heapq.heappop(ready)
        planned.append(by_id[aid])
        for nxt in dependents[aid]:
            in_degree[nxt] -= 1
            if in_degree[nxt] == 0:
                heapq.heappush(ready, (order[nxt], nxt))

    if len(planned) < len(selected):
        remaining = selected - {a.action_id for a in planned}
        raise CyclicDependency(_find_cycle(by_id, remaining))

    return ExecutionPlan(actions=tuple(planned))
