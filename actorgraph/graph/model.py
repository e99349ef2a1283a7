"""In-memory actor graph."""

from datetime import datetime
from enum import Enum
from typing import Iterator

from pydantic import BaseModel

from actorgraph.errors import DuplicateEdgeError, MissingNodeError

ACTOR_TYPE_COLORS = {
    "person": "#10b981",
    "team": "#06b6d4",
    "system": "#f59e0b",
    "organization": "#8b5cf6",
    "role": "#6366f1",
    "project": "#06b6d4",
    "location": "#ec4899",
    "technology": "#14b8a6",
    "unknown": "#6b7280",
}

RELATIONSHIP_COLORS = {
    "works_with": "#4CAF50",
    "member_of": "#2196F3",
    "owns": "#FF9800",
    "reports_to": "#9C27B0",
    "depends_on": "#F44336",
    "blocks": "#E91E63",
    "related_to": "#9E9E9E",
}

BASE_NODE_SIZE = 10


class EdgeSource(str, Enum):
    EXPLICIT = "explicit"
    IMPLICIT_TEAM = "implicit_team"
    IMPLICIT_ORG = "implicit_org"
    TAG_COOCCURRENCE = "tag_cooccurrence"


def color_for_actor_type(actor_type: str) -> str:
    return ACTOR_TYPE_COLORS.get(actor_type, ACTOR_TYPE_COLORS["unknown"])


def color_for_relationship_type(relationship_type: str) -> str:
    return RELATIONSHIP_COLORS.get(relationship_type, RELATIONSHIP_COLORS["related_to"])


class GraphNode(BaseModel):
    """An actor as a graph node, with degree metrics filled in after the build."""

    id: str
    label: str
    actor_type: str = "unknown"
    role: str | None = None
    team: str | None = None
    organization: str | None = None
    last_seen_at: datetime | None = None
    mention_count: int = 1
    degree: int = 0
    in_degree: int = 0
    out_degree: int = 0
    size: int = BASE_NODE_SIZE  # display hint only
    color: str = ACTOR_TYPE_COLORS["unknown"]


class GraphEdge(BaseModel):
    """A directed edge, either a confirmed relationship or an inferred one."""

    id: str
    source: str
    target: str
    relationship_type: str
    edge_source: EdgeSource = EdgeSource.EXPLICIT
    weight: float = 1.0
    confidence: float = 1.0
    strength: float = 1.0
    context: str | None = None
    source_file: str | None = None
    relationship_id: int | None = None
    doc_count: int | None = None
    color: str = RELATIONSHIP_COLORS["related_to"]
    style: str = "solid"

    @property
    def pair(self) -> frozenset[str]:
        return frozenset((self.source, self.target))


class ActorGraph:
    """Directed graph of actors with at most one edge per unordered pair of nodes.

    Nodes and edges keep their insertion order. Self-loops are rejected.
    """

    def __init__(self, context_id: str) -> None:
        self.context_id = context_id
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}
        # node id -> neighbour id -> edge id, in both directions
        self._adjacency: dict[str, dict[str, str]] = {}

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def add_node(self, node: GraphNode) -> None:
        if node.id in self._nodes:
            raise ValueError(f"Node {node.id} already exists")
        self._nodes[node.id] = node
        self._adjacency[node.id] = {}

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> GraphNode:
        try:
            return self._nodes[node_id]
        except KeyError as err:
            raise MissingNodeError(node_id) from err

    def nodes(self) -> Iterator[GraphNode]:
        return iter(self._nodes.values())

    def edges(self) -> Iterator[GraphEdge]:
        return iter(self._edges.values())

    def get_edge(self, edge_id: str) -> GraphEdge:
        return self._edges[edge_id]

    def add_edge(self, edge: GraphEdge) -> None:
        """Add an edge between two existing, not yet connected nodes.

        Raises:
            MissingNodeError: If either endpoint is not in the graph
            DuplicateEdgeError: If the nodes are already connected, in either direction
            ValueError: For self-loops or a reused edge id
        """
        for node_id in (edge.source, edge.target):
            if node_id not in self._nodes:
                raise MissingNodeError(node_id)
        if edge.source == edge.target:
            raise ValueError(f"Self-loop on {edge.source} is not allowed")
        if edge.id in self._edges:
            raise ValueError(f"Edge {edge.id} already exists")
        if self.has_edge_between(edge.source, edge.target):
            raise DuplicateEdgeError(f"{edge.source} and {edge.target} are already connected")

        self._edges[edge.id] = edge
        self._adjacency[edge.source][edge.target] = edge.id
        self._adjacency[edge.target][edge.source] = edge.id

    def has_edge_between(self, node_a: str, node_b: str) -> bool:
        return node_b in self._adjacency.get(node_a, {})

    def edge_between(self, node_a: str, node_b: str) -> GraphEdge | None:
        edge_id = self._adjacency.get(node_a, {}).get(node_b)
        return self._edges[edge_id] if edge_id else None

    def neighbors(self, node_id: str) -> list[str]:
        """Neighbours in either direction, in edge insertion order."""
        if node_id not in self._nodes:
            raise MissingNodeError(node_id)
        return list(self._adjacency[node_id])

    def incident_edges(self, node_id: str) -> list[GraphEdge]:
        if node_id not in self._nodes:
            raise MissingNodeError(node_id)
        return [self._edges[edge_id] for edge_id in self._adjacency[node_id].values()]

    def in_degree(self, node_id: str) -> int:
        return sum(1 for edge in self.incident_edges(node_id) if edge.target == node_id)

    def out_degree(self, node_id: str) -> int:
        return sum(1 for edge in self.incident_edges(node_id) if edge.source == node_id)

    def degree(self, node_id: str) -> int:
        return len(self.neighbors(node_id))

    def compute_metrics(self) -> None:
        """Store degree metrics and the derived display size on every node."""
        for node in self._nodes.values():
            node.in_degree = self.in_degree(node.id)
            node.out_degree = self.out_degree(node.id)
            node.degree = node.in_degree + node.out_degree
            node.size = BASE_NODE_SIZE + node.degree * 2

    def subgraph(self, node_ids: set[str]) -> "ActorGraph":
        """Copy of the graph restricted to node_ids and the edges between them."""
        sub = ActorGraph(self.context_id)
        for node in self._nodes.values():
            if node.id in node_ids:
                sub.add_node(node.model_copy())
        for edge in self._edges.values():
            if edge.source in node_ids and edge.target in node_ids:
                sub.add_edge(edge.model_copy())
        return sub

    def signature(self) -> tuple[tuple, tuple]:
        """Hashable description of nodes and edges, for comparing two builds."""
        nodes = tuple(node.model_dump_json() for node in self._nodes.values())
        edges = tuple(edge.model_dump_json() for edge in self._edges.values())
        return nodes, edges
