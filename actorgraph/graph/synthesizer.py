"""Synthesizing graph edges from confirmed relationships and shared attributes."""

import logging
from typing import Iterable

from pydantic import BaseModel

from actorgraph.domain.actor import Actor
from actorgraph.domain.relationships import Relationship, TagCooccurrence
from actorgraph.errors import DuplicateEdgeError, MissingNodeError

from .model import ActorGraph, EdgeSource, GraphEdge, GraphNode, color_for_relationship_type

logger = logging.getLogger(__name__)

TAG_WEIGHT_DOC_SCALE = 5
TAG_WEIGHT_CAP = 0.5


class EdgeWeights(BaseModel):
    """Base weight of each kind of edge."""

    explicit: float = 0.5
    same_team: float = 0.25
    same_org: float = 0.15
    tag_cooccurrence: float = 0.3


def synthesize_edges(
    actors: Iterable[Actor],
    relationships: Iterable[Relationship],
    cooccurrences: Iterable[TagCooccurrence] = (),
    weights: EdgeWeights | None = None,
    include_implicit: bool = True,
) -> list[GraphEdge]:
    """Build the edge list for a set of actors.

    Edges are added by strict precedence: confirmed relationships, then same team,
    then same organization, then tag co-occurrence. A pair of actors that is
    already connected, in either direction, is never connected a second time.

    Args:
        actors: Actors that become nodes, in a stable order
        relationships: Confirmed relationships between them
        cooccurrences: Person/project pairs tagged together on several documents
        weights: Edge weights, defaults to EdgeWeights()
        include_implicit: When False only confirmed relationships become edges

    Returns:
        Edges in insertion order, with ids e0, e1, ...
    """
    weights = weights or EdgeWeights()
    actors = list(actors)

    scratch = ActorGraph(context_id="")
    for actor in actors:
        if not scratch.has_node(actor.id):
            scratch.add_node(GraphNode(id=actor.id, label=actor.name))

    for rel in relationships:
        _try_add(
            scratch,
            GraphEdge(
                id=f"e{scratch.edge_count}",
                source=rel.source_actor_id,
                target=rel.target_actor_id,
                relationship_type=rel.relationship_type,
                edge_source=EdgeSource.EXPLICIT,
                weight=rel.confidence * rel.strength * weights.explicit,
                confidence=rel.confidence,
                strength=rel.strength,
                context=rel.context,
                source_file=rel.source_file,
                relationship_id=rel.id,
                color=color_for_relationship_type(rel.relationship_type),
            ),
        )

    if not include_implicit:
        return list(scratch.edges())

    for team, members in _group_by(actors, "team").items():
        for source_id, target_id in _pairs(members):
            _try_add(
                scratch,
                GraphEdge(
                    id=f"e{scratch.edge_count}",
                    source=source_id,
                    target=target_id,
                    relationship_type="same_team",
                    edge_source=EdgeSource.IMPLICIT_TEAM,
                    weight=weights.same_team,
                    context=f"Both in team: {team}",
                    color="#10b981",
                    style="dashed",
                ),
            )

    for org, members in _group_by(actors, "organization").items():
        for source_id, target_id in _pairs(members):
            _try_add(
                scratch,
                GraphEdge(
                    id=f"e{scratch.edge_count}",
                    source=source_id,
                    target=target_id,
                    relationship_type="same_org",
                    edge_source=EdgeSource.IMPLICIT_ORG,
                    weight=weights.same_org,
                    context=f"Both in org: {org}",
                    color="#f59e0b",
                    style="dotted",
                ),
            )

    name_to_id: dict[str, str] = {}
    for actor in actors:
        name_to_id.setdefault(actor.name.lower(), actor.id)

    for cooc in cooccurrences:
        person_id = name_to_id.get(cooc.person.lower())
        project_id = name_to_id.get(cooc.project.lower())
        if not person_id or not project_id or person_id == project_id:
            continue
        _try_add(
            scratch,
            GraphEdge(
                id=f"e{scratch.edge_count}",
                source=person_id,
                target=project_id,
                relationship_type="works_on",
                edge_source=EdgeSource.TAG_COOCCURRENCE,
                weight=tag_cooccurrence_weight(cooc.doc_count, weights.tag_cooccurrence),
                context=f"Tagged together in {cooc.doc_count} documents",
                doc_count=cooc.doc_count,
                color="#8b5cf6",
                style="dashed",
            ),
        )

    return list(scratch.edges())


def tag_cooccurrence_weight(doc_count: int, base_weight: float = 0.3) -> float:
    """Weight grows with the number of shared documents, capped at TAG_WEIGHT_CAP."""
    return min(base_weight * (doc_count / TAG_WEIGHT_DOC_SCALE), TAG_WEIGHT_CAP)


def _try_add(graph: ActorGraph, edge: GraphEdge) -> bool:
    try:
        graph.add_edge(edge)
    except MissingNodeError as err:
        logger.warning(
            f"Skipping {edge.edge_source.value} edge {edge.source} -> {edge.target}: "
            f"unknown actor {err.args[0]}"
        )
        return False
    except DuplicateEdgeError:
        logger.debug(
            f"Skipping {edge.edge_source.value} edge {edge.source} -> {edge.target}: "
            "pair already connected"
        )
        return False
    except ValueError as err:
        logger.warning(f"Skipping {edge.edge_source.value} edge: {err}")
        return False
    return True


def _group_by(actors: list[Actor], attribute: str) -> dict[str, list[str]]:
    """Map each non-empty attribute value to the ids of actors carrying it."""
    groups: dict[str, list[str]] = {}
    for actor in actors:
        value = getattr(actor, attribute)
        if value:
            groups.setdefault(value, []).append(actor.id)
    return groups


def _pairs(members: list[str]) -> Iterable[tuple[str, str]]:
    for i, source_id in enumerate(members):
        for target_id in members[i + 1 :]:
            yield source_id, target_id
