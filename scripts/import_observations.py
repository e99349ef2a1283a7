"""CLI for loading extracted actors, document tags and relationship observations into a local store"""

import argparse
import json
from pathlib import Path

from loguru import logger

from actorgraph.config import settings
from actorgraph.domain.actor import Actor
from actorgraph.domain.relationships import Document
from actorgraph.domain.suggestion import Observation
from actorgraph.stores.local_store import LocalStore
from actorgraph.suggestions.ledger import SuggestionLedger


def main(context_id: str, in_file: str, store_path: str) -> dict[str, int]:
    """Import an extraction file into the store.

    The file holds optional "actors", "documents" and "observations" lists.
    Observations go through the suggestion ledger, so dismissed triples stay dismissed.
    Everything is imported in one transaction and saved once at the end.
    """
    data = json.loads(Path(in_file).read_text())
    store = LocalStore(filepath=store_path)
    ledger = SuggestionLedger(
        store,
        max_context_samples=settings.max_context_samples,
        context_sample_chars=settings.context_sample_chars,
        min_confidence=settings.suggestion_min_confidence,
    )

    stats = {"actors": 0, "documents": 0, "suggestions": 0, "discarded": 0}
    with store.transaction():
        for actor_data in data.get("actors", []):
            store.upsert_actor(Actor(context_id=context_id, **actor_data))
            stats["actors"] += 1
        for doc_data in data.get("documents", []):
            store.add_document(Document(context_id=context_id, **doc_data))
            stats["documents"] += 1

        for obs_data in data.get("observations", []):
            observation = Observation(**obs_data)
            if store.get_actor(context_id, observation.source_actor_id) is None or (
                store.get_actor(context_id, observation.target_actor_id) is None
            ):
                logger.warning(
                    f"Cannot resolve observation {observation.source_actor_id} -> "
                    f"{observation.target_actor_id}"
                )
                stats["discarded"] += 1
                continue
            if ledger.merge_observation(context_id, observation) is None:
                stats["discarded"] += 1
            else:
                stats["suggestions"] += 1

    logger.info(
        f"Imported {stats['actors']} actors, {stats['documents']} documents, "
        f"{stats['suggestions']} observations ({stats['discarded']} discarded)"
    )
    return stats


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--context", type=str, required=True, help="Context (project) ID")
    parser.add_argument("--in-file", type=str, required=True, help="Extraction JSON file")
    parser.add_argument(
        "--store",
        type=str,
        required=False,
        help="Local store file",
        default=settings.store_path,
    )

    args = parser.parse_args()

    main(context_id=args.context, in_file=args.in_file, store_path=args.store)
