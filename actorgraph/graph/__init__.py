"""Actor graph synthesis, caching and queries."""

from actorgraph.graph.builder import GraphBuilder
from actorgraph.graph.cache import GraphCache
from actorgraph.graph.model import ActorGraph, EdgeSource, GraphEdge, GraphNode
from actorgraph.graph.options import GraphOptions
from actorgraph.graph.service import GraphService
from actorgraph.graph.synthesizer import EdgeWeights, synthesize_edges

__all__ = [
    "ActorGraph",
    "EdgeSource",
    "EdgeWeights",
    "GraphBuilder",
    "GraphCache",
    "GraphEdge",
    "GraphNode",
    "GraphOptions",
    "GraphService",
    "synthesize_edges",
]
