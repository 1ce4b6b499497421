"""
Core matching engine: Hopcroft-Karp maximum bipartite matching between
request slots and availability slots.
"""

import math
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from .config import MatcherConfig
from .errors import InvalidArgument
from .models import NIL, AvailabilitySlot, RequestSlot

# Handle 0 is reserved for the NIL terminal; requests get handles 1..n.
NIL_HANDLE = 0
UNPAIRED = -1
INF = math.inf


def _distinct(slots) -> Dict[int, object]:
    """Drop None members and repeated objects, keyed by object identity."""
    return {id(slot): slot for slot in slots if slot is not None}


@dataclass
class MatchingStats:
    """Counters for the most recent matching run."""
    requests: int = 0
    availabilities: int = 0
    edges: int = 0
    phases: int = 0
    matches: int = 0


class MatchingEngine:
    """
    Hopcroft-Karp matching over an index arena.

    Requests and availabilities are each sorted by (start, end) before they
    are given handles, and every request tries its availabilities in that
    order. The size of the matching never depends on this order, but which
    of several equally large matchings comes out does.
    """

    def __init__(self, config: Optional[MatcherConfig] = None):
        self.config = config or MatcherConfig()
        self.stats = MatchingStats()

        self.requests: List[RequestSlot] = []
        self.availabilities: List[AvailabilitySlot] = []
        self.adj: List[List[int]] = [[]]
        self.pair_u: List[int] = [UNPAIRED]
        self.pair_v: List[int] = []
        self.dist: List[float] = [INF]

    def match(self, requests: Iterable[RequestSlot],
              availabilities: Iterable[AvailabilitySlot]) -> Set[RequestSlot]:
        """
        Compute a maximum matching.

        Args:
            requests: Request slots to be served
            availabilities: Volunteer availability slots

        Returns:
            Set[RequestSlot]: The requests that were paired. Read
            ``paired_node()`` on each to get its volunteer slot.
        """
        if requests is None or availabilities is None:
            raise InvalidArgument("Request and availability slots must not be None")

        self._build(requests, availabilities)

        while self.layer():
            self.stats.phases += 1
            augmented = 0
            for u in range(1, len(self.requests) + 1):
                if self.pair_u[u] == UNPAIRED and self._augment(u):
                    augmented += 1
            self.stats.matches += augmented
            if self.config.verbose:
                print(f"Phase {self.stats.phases}: shortest augmenting path "
                      f"{self.dist[NIL_HANDLE]:.0f}, {augmented} augmented, "
                      f"{self.stats.matches} matched")

        self._write_back()
        return {r for u, r in enumerate(self.requests, 1) if self.pair_u[u] != UNPAIRED}

    def _build(self, requests, availabilities) -> None:
        """Reset node state, assign handles and add containment edges.

        A slot object listed more than once gets a single handle.
        """
        requests = _distinct(requests)
        availabilities = _distinct(availabilities)
        shared = requests.keys() & availabilities.keys()
        if shared:
            raise InvalidArgument(
                f"Slots given as both request and availability: {[requests[k] for k in shared]}"
            )

        self.requests = sorted(requests.values(), key=lambda s: (s.start, s.end))
        self.availabilities = sorted(availabilities.values(), key=lambda s: (s.start, s.end))

        for slot in self.requests + self.availabilities:
            slot.reset()

        n = len(self.requests)
        self.adj = [[] for _ in range(n + 1)]
        self.pair_u = [UNPAIRED] * (n + 1)
        self.pair_v = [NIL_HANDLE] * len(self.availabilities)
        self.dist = [INF] * (n + 1)
        self.stats = MatchingStats(requests=n, availabilities=len(self.availabilities))

        for v, availability in enumerate(self.availabilities):
            for u, request in enumerate(self.requests, 1):
                if self._is_compatible(availability, request):
                    self.adj[u].append(v)
                    request.add_neighbour(availability)
                    availability.add_neighbour(request)
                    self.stats.edges += 1

        if self.config.verbose:
            print(f"Built graph: {n} requests, {len(self.availabilities)} availabilities, "
                  f"{self.stats.edges} edges")

    def _is_compatible(self, availability: AvailabilitySlot, request: RequestSlot) -> bool:
        """Check whether a volunteer slot may serve a request slot."""
        return availability.contains(request)

    def layer(self) -> bool:
        """
        Run one breadth-first layering pass from every free request.

        Returns:
            bool: True if some free request reaches a free availability
            along an alternating path.
        """
        queue = deque()
        for u in range(1, len(self.requests) + 1):
            if self.pair_u[u] == UNPAIRED:
                self.dist[u] = 0
                queue.append(u)
            else:
                self.dist[u] = INF

        self.dist[NIL_HANDLE] = INF

        while queue:
            u = queue.popleft()
            if self.dist[u] < self.dist[NIL_HANDLE]:
                for v in self.adj[u]:
                    w = self.pair_v[v]
                    if self.dist[w] == INF:
                        self.dist[w] = self.dist[u] + 1
                        queue.append(w)

        return self.dist[NIL_HANDLE] != INF

    def _augment(self, root: int) -> bool:
        """
        Depth-first search for a shortest augmenting path starting at ``root``.

        Each frame holds a request handle, an iterator over its remaining
        neighbours and the neighbour currently being followed. A request
        whose neighbours are exhausted gets an infinite distance so that no
        later search in this phase visits it again.
        """
        stack = [[root, iter(self.adj[root]), None]]

        while stack:
            frame = stack[-1]
            u, neighbours = frame[0], frame[1]
            advanced = False

            for v in neighbours:
                w = self.pair_v[v]
                if self.dist[w] != self.dist[u] + 1:
                    continue
                frame[2] = v
                if w == NIL_HANDLE:
                    for request, _, availability in stack:
                        self.pair_u[request] = availability
                        self.pair_v[availability] = request
                    return True
                stack.append([w, iter(self.adj[w]), None])
                advanced = True
                break

            if not advanced:
                self.dist[u] = INF
                stack.pop()

        return False

    def _write_back(self) -> None:
        """
        Copy pairings and final distances from the arena onto the slots.

        An availability has no layer of its own. It is labelled with the
        layer of the node behind it: its paired request, or NIL when free.
        """
        for u, request in enumerate(self.requests, 1):
            request.distance = self.dist[u]
            if self.pair_u[u] != UNPAIRED:
                request.pair_with(self.availabilities[self.pair_u[u]])
        for v, availability in enumerate(self.availabilities):
            availability.distance = self.dist[self.pair_v[v]]


def match_time_slots(requests: Iterable[RequestSlot], availabilities: Iterable[AvailabilitySlot],
                     config: Optional[MatcherConfig] = None) -> Set[RequestSlot]:
    """
    Convenience function to run the matching engine.

    Args:
        requests: Request slots to be served
        availabilities: Volunteer availability slots
        config: Optional matcher configuration

    Returns:
        Set[RequestSlot]: The requests that were paired with a volunteer
    """
    engine = MatchingEngine(config)
    return engine.match(requests, availabilities)


def validate_matching(requests: Iterable[RequestSlot],
                      matched: Iterable[RequestSlot]) -> Dict[str, List[str]]:
    """
    Validate a completed matching.

    Args:
        requests: All request slots that were offered to the engine
        matched: The requests the engine reported as paired

    Returns:
        Dict[str, List[str]]: Validation results
    """
    violations = {
        'errors': [],
        'warnings': []
    }

    matched = [r for r in matched if r is not None]
    seen = {}

    for request in matched:
        partner = request.paired_node()
        if partner is NIL:
            violations['errors'].append(f"{request!r} reported as matched but has no partner")
            continue

        if not partner.contains(request):
            violations['errors'].append(f"{partner!r} does not contain {request!r}")

        if partner.paired_node() is not request:
            violations['errors'].append(f"Pairing of {request!r} and {partner!r} is not mutual")

        if id(partner) in seen:
            violations['errors'].append(
                f"{partner!r} is paired with both {seen[id(partner)]!r} and {request!r}"
            )
        seen[id(partner)] = request

    matched_ids = {id(r) for r in matched}
    unmatched = [r for r in requests if r is not None and id(r) not in matched_ids]
    if unmatched:
        violations['warnings'].append(f"Unmatched requests: {len(unmatched)}")

    return violations
