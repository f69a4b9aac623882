"""Restriction of the forward import graph to a set of packages."""

from collections.abc import Iterable, Mapping

from .models import Edge, InducedSubgraph


def induced_subgraph(forward: Mapping[str, Iterable[str]], resolved: Iterable[str]) -> InducedSubgraph:
    """Return the edges of forward whose endpoints are both in resolved.

    Self-imports are dropped. Every source and every destination of the map
    is visited once, sorted, so the result does not depend on the order of
    the resolved packages.
    """
    members = frozenset(resolved)
    edges = []
    for source in sorted(forward):
        if source not in members:
            continue
        for target in sorted(forward[source]):
            if target in members and target != source:
                edges.append(Edge(source, target))
    return InducedSubgraph(nodes=members, edges=edges)
