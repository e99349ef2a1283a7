"""Read-only queries over a built actor graph."""

from collections import Counter, deque
from typing import Literal, Mapping

from pydantic import BaseModel

from .model import ActorGraph, EdgeSource, GraphEdge, GraphNode
from .options import GroupBy

GROUP_NODE_TYPE = "__group"


class ActorSummary(BaseModel):
    id: str
    name: str
    type: str


class Hub(ActorSummary):
    degree: int


class PathResult(BaseModel):
    """Outcome of a shortest path query.

    reason is "not_found" when either actor is missing from the graph, which is
    different from "no_path" between two actors that are both present.
    """

    found: bool
    path: list[str] | None = None
    reason: Literal["found", "not_found", "no_path"] = "found"


class Neighborhood(BaseModel):
    found: bool
    center: str
    depth: int = 1
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []


class GraphStats(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    explicit: int = 0
    implicit_team: int = 0
    implicit_org: int = 0
    tag_cooccurrence: int = 0
    by_node_type: dict[str, int] = {}
    by_edge_type: dict[str, int] = {}


def hubs(graph: ActorGraph, limit: int = 10) -> list[Hub]:
    """Most connected actors, by degree descending; ties keep insertion order."""
    ranked = sorted(graph.nodes(), key=lambda node: node.degree, reverse=True)
    return [
        Hub(id=node.id, name=node.label, type=node.actor_type, degree=node.degree)
        for node in ranked[: max(limit, 0)]
    ]


def isolated(graph: ActorGraph) -> list[ActorSummary]:
    """Actors without any edge."""
    return [
        ActorSummary(id=node.id, name=node.label, type=node.actor_type)
        for node in graph.nodes()
        if graph.degree(node.id) == 0
    ]


def shortest_path(graph: ActorGraph, source_id: str, target_id: str) -> PathResult:
    """Find the shortest path between two actors, ignoring edge direction, weight and type.

    Args:
        graph: Graph to search
        source_id: Actor the path starts from
        target_id: Actor the path ends at

    Returns:
        PathResult with the list of actor ids from source to target when found
    """
    if not graph.has_node(source_id) or not graph.has_node(target_id):
        return PathResult(found=False, reason="not_found")

    if source_id == target_id:
        return PathResult(found=True, path=[source_id])

    visited = {source_id}
    queue = deque([(source_id, [source_id])])  # (node_id, path)

    while queue:
        current_id, path = queue.popleft()
        for neighbor_id in graph.neighbors(current_id):
            if neighbor_id == target_id:
                return PathResult(found=True, path=path + [neighbor_id])
            if neighbor_id not in visited:
                visited.add(neighbor_id)
                queue.append((neighbor_id, path + [neighbor_id]))

    return PathResult(found=False, reason="no_path")


def neighborhood(graph: ActorGraph, actor_id: str, depth: int = 1) -> Neighborhood:
    """Expand breadth-first from an actor up to depth hops.

    Returns the visited actors and every edge between two visited actors.
    """
    if not graph.has_node(actor_id):
        return Neighborhood(found=False, center=actor_id, depth=depth)

    visited = {actor_id}
    frontier = [actor_id]
    for _ in range(max(depth, 0)):
        next_frontier = []
        for node_id in frontier:
            for neighbor_id in graph.neighbors(node_id):
                if neighbor_id not in visited:
                    visited.add(neighbor_id)
                    next_frontier.append(neighbor_id)
        if not next_frontier:
            break
        frontier = next_frontier

    sub = graph.subgraph(visited)
    return Neighborhood(
        found=True,
        center=actor_id,
        depth=depth,
        nodes=list(sub.nodes()),
        edges=list(sub.edges()),
    )


def graph_stats(graph: ActorGraph) -> GraphStats:
    by_source = Counter(edge.edge_source for edge in graph.edges())
    return GraphStats(
        node_count=graph.node_count,
        edge_count=graph.edge_count,
        explicit=by_source[EdgeSource.EXPLICIT],
        implicit_team=by_source[EdgeSource.IMPLICIT_TEAM],
        implicit_org=by_source[EdgeSource.IMPLICIT_ORG],
        tag_cooccurrence=by_source[EdgeSource.TAG_COOCCURRENCE],
        by_node_type=dict(Counter(node.actor_type or "unknown" for node in graph.nodes())),
        by_edge_type=dict(Counter(edge.relationship_type for edge in graph.edges())),
    )


def node_json(node: GraphNode) -> dict:
    return {
        "id": node.id,
        "label": node.label,
        "type": node.actor_type,
        "role": node.role,
        "team": node.team,
        "organization": node.organization,
        "last_seen_at": node.last_seen_at.isoformat() if node.last_seen_at else None,
        "mention_count": node.mention_count,
        "degree": node.degree,
        "in_degree": node.in_degree,
        "out_degree": node.out_degree,
        "size": node.size,
        "color": node.color,
    }


def edge_json(edge: GraphEdge, labels: Mapping[str, str] | None = None) -> dict:
    """Serialize an edge; labels maps actor ids to display names."""
    labels = labels or {}
    source_label = labels.get(edge.source)
    target_label = labels.get(edge.target)
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "label": edge.relationship_type,
        "type": edge.relationship_type,
        "edge_source": edge.edge_source.value,
        "context": edge.context,
        "confidence": edge.confidence,
        "strength": edge.strength,
        "weight": edge.weight,
        "source_file": edge.source_file,
        "source_label": source_label or edge.source,
        "target_label": target_label or edge.target,
        "doc_count": edge.doc_count,
        "color": edge.color,
        "style": edge.style,
    }


def group_node_id(group_by: str, value: str) -> str:
    return f"group_{group_by}_{value}"


def to_json(graph: ActorGraph, group_by: GroupBy | None = None) -> dict[str, list[dict]]:
    """Serialize a graph as {"nodes": [{"data": ...}], "edges": [{"data": ...}]}.

    With group_by set, every actor carrying a value for that field gets a
    "parent" pointing at a compound group node, one per distinct value. The
    graph itself is not modified.
    """
    nodes = []
    groups: list[str] = []

    for node in graph.nodes():
        data = node_json(node)
        if group_by:
            value = data.get(group_by)
            if value:
                data["parent"] = group_node_id(group_by, value)
                if value not in groups:
                    groups.append(value)
        nodes.append({"data": data})

    for value in groups:
        nodes.append(
            {
                "data": {
                    "id": group_node_id(group_by, value),
                    "label": value,
                    "type": GROUP_NODE_TYPE,
                    "group_by": group_by,
                    "is_compound": True,
                }
            }
        )

    labels = {node.id: node.label for node in graph.nodes()}
    edges = [{"data": edge_json(edge, labels)} for edge in graph.edges()]
    return {"nodes": nodes, "edges": edges}


def neighborhood_json(result: Neighborhood) -> dict[str, list[dict]]:
    """Serialize a neighborhood in the same shape as to_json, with edge labels filled in."""
    labels = {node.id: node.label for node in result.nodes}
    return {
        "nodes": [{"data": node_json(node)} for node in result.nodes],
        "edges": [{"data": edge_json(edge, labels)} for edge in result.edges],
    }
