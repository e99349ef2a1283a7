"""CLI printing the hubs, isolated actors and edge mix of a context's graph"""

import argparse

from actorgraph.config import settings
from actorgraph.graph.builder import GraphBuilder
from actorgraph.graph.service import GraphService
from actorgraph.stores.local_store import LocalStore


def main(context_id: str, store_path: str, limit: int = 10) -> str:
    store = LocalStore(filepath=store_path)
    service = GraphService(GraphBuilder(store, tag_min_documents=settings.tag_min_documents))

    stats = service.stats(context_id)
    lines = [
        f"=== Context {context_id} ===",
        f"  {stats.node_count} actors, {stats.edge_count} edges",
        f"  explicit: {stats.explicit}, same team: {stats.implicit_team}, "
        f"same org: {stats.implicit_org}, tagged: {stats.tag_cooccurrence}",
        "",
        "=== Hubs ===",
    ]
    for hub in service.hubs(context_id, limit=limit):
        lines.append(f"  {hub.name} ({hub.type}): {hub.degree}")

    lines += ["", "=== Isolated ==="]
    for actor in service.isolated(context_id):
        lines.append(f"  {actor.name} ({actor.type})")

    report = "\n".join(lines)
    print(report)
    return report


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--context", type=str, required=True, help="Context (project) ID")
    parser.add_argument(
        "--store",
        type=str,
        required=False,
        help="Local store file",
        default=settings.store_path,
    )
    parser.add_argument("--limit", type=int, required=False, default=settings.default_hub_limit)

    args = parser.parse_args()

    main(context_id=args.context, store_path=args.store, limit=args.limit)
