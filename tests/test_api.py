from fastapi.testclient import TestClient

from actorgraph.stores.local_store import LocalStore


def test_health(test_client: TestClient) -> None:
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_context_stats(test_client: TestClient) -> None:
    response = test_client.get("/api/contexts/proj1/stats")
    assert response.status_code == 200
    assert response.json() == {
        "context_id": "proj1",
        "actors": 5,
        "relationships": 1,
        "pending_suggestions": 1,
    }


def test_graph_endpoint(test_client: TestClient) -> None:
    response = test_client.get("/api/contexts/proj1/graph")
    assert response.status_code == 200
    data = response.json()
    assert len(data["nodes"]) == 5
    assert len(data["edges"]) == 4
    assert data["nodes"][0]["data"]["id"] == "alice"
    assert data["edges"][0]["data"]["edge_source"] == "explicit"


def test_graph_endpoint_filters(test_client: TestClient) -> None:
    response = test_client.get(
        "/api/contexts/proj1/graph",
        params={"actor_types": "person", "include_implicit": "false"},
    )
    assert response.status_code == 200
    data = response.json()
    assert {node["data"]["type"] for node in data["nodes"]} == {"person"}
    assert data["edges"] == []


def test_graph_endpoint_group_by(test_client: TestClient) -> None:
    response = test_client.get("/api/contexts/proj1/graph", params={"group_by": "team"})
    assert response.status_code == 200
    compound = [n for n in response.json()["nodes"] if n["data"].get("is_compound")]
    assert [n["data"]["label"] for n in compound] == ["Platform"]


def test_graph_endpoint_rejects_bad_options(test_client: TestClient) -> None:
    assert test_client.get("/api/contexts/proj1/graph?edge_types=bogus").status_code == 422
    assert test_client.get("/api/contexts/proj1/graph?group_by=color").status_code == 422


def test_path_endpoint(test_client: TestClient) -> None:
    response = test_client.get("/api/contexts/proj1/graph/path/bob/billing")
    assert response.status_code == 200
    assert response.json() == {"path": ["bob", "alice", "billing"], "found": True}

    response = test_client.get("/api/contexts/proj1/graph/path/bob/dave")
    assert response.status_code == 200
    assert response.json() == {"path": None, "found": False}

    response = test_client.get("/api/contexts/proj1/graph/path/bob/ghost")
    assert response.status_code == 404


def test_neighbors_endpoint(test_client: TestClient) -> None:
    response = test_client.get("/api/contexts/proj1/graph/neighbors/carol?depth=1")
    assert response.status_code == 200
    data = response.json()
    assert {n["data"]["id"] for n in data["nodes"]} == {"carol", "alice", "billing"}
    assert len(data["edges"]) == 3

    assert test_client.get("/api/contexts/proj1/graph/neighbors/ghost").status_code == 404
    assert test_client.get("/api/contexts/proj1/graph/neighbors/carol?depth=-1").status_code == 422


def test_hubs_isolated_and_stats_endpoints(test_client: TestClient) -> None:
    hubs = test_client.get("/api/contexts/proj1/graph/hubs?limit=1").json()["hubs"]
    assert hubs == [{"id": "alice", "name": "Alice", "type": "person", "degree": 3}]

    isolated = test_client.get("/api/contexts/proj1/graph/isolated").json()["isolated"]
    assert [actor["id"] for actor in isolated] == ["dave"]

    stats = test_client.get("/api/contexts/proj1/graph/stats").json()
    assert stats["node_count"] == 5
    assert stats["tag_cooccurrence"] == 1


def test_refresh_endpoint(test_client: TestClient) -> None:
    response = test_client.post("/api/contexts/proj1/graph/refresh")
    assert response.status_code == 200
    assert response.json() == {"refreshed": True, "nodes": 5, "edges": 4}


def test_unavailable_store_returns_503(test_client: TestClient, store: LocalStore) -> None:
    test_client.get("/api/contexts/proj1/graph")
    store.close()

    assert test_client.get("/api/contexts/proj1/graph").status_code == 503
    assert test_client.get("/api/contexts/proj1/graph/hubs").status_code == 503
    assert test_client.get("/api/contexts/proj1/stats").status_code == 503
    assert test_client.get("/health").json() == {"status": "unavailable"}


def test_list_suggestions_endpoint(test_client: TestClient) -> None:
    response = test_client.get("/api/contexts/proj1/suggestions")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["context_id"] == "proj1"
    item = data["items"][0]
    assert item["suggestion"]["id"] == 1
    assert item["suggestion"]["is_approved"] is False
    assert item["source_name"] == "Bob"
    assert data["stats"]["pending"] == 1


def test_observation_then_approve_updates_graph(test_client: TestClient) -> None:
    observation = {
        "source_actor_id": "carol",
        "target_actor_id": "dave",
        "relationship_type": "mentors",
        "confidence": 0.8,
        "document_ref": "doc9",
        "excerpt": "Carol mentors Dave",
    }
    test_client.get("/api/contexts/proj1/graph")

    response = test_client.post("/api/contexts/proj1/suggestions/observations", json=observation)
    assert response.status_code == 200
    body = response.json()
    assert body["merged"] is True
    suggestion_id = body["suggestion"]["id"]

    response = test_client.post(f"/api/contexts/proj1/suggestions/{suggestion_id}/approve")
    assert response.status_code == 200
    assert response.json()["approved"] is True
    assert response.json()["evidence"] == 1

    path = test_client.get("/api/contexts/proj1/graph/path/carol/dave").json()
    assert path == {"path": ["carol", "dave"], "found": True}

    approved = test_client.get("/api/contexts/proj1/suggestions?status=approved").json()
    assert [item["suggestion"]["id"] for item in approved["items"]] == [suggestion_id]


def test_discarded_observation(test_client: TestClient) -> None:
    response = test_client.post(
        "/api/contexts/proj1/suggestions/observations",
        json={"source_actor_id": "bob", "target_actor_id": "dave", "confidence": 0.1},
    )
    assert response.status_code == 200
    assert response.json() == {"merged": False, "suggestion": None}


def test_dismiss_and_reject_endpoints(test_client: TestClient) -> None:
    response = test_client.post("/api/contexts/proj1/suggestions/1/dismiss")
    assert response.status_code == 200
    assert response.json()["suggestion"]["status"] == "dismissed"
    assert test_client.get("/api/contexts/proj1/suggestions").json()["total"] == 0

    response = test_client.post("/api/contexts/proj1/suggestions/1/reject")
    assert response.json() == {"rejected": True}
    assert test_client.post("/api/contexts/proj1/suggestions/1/reject").status_code == 404


def test_unknown_suggestion_returns_404(test_client: TestClient) -> None:
    response = test_client.post("/api/contexts/proj1/suggestions/42/approve")
    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_neighbors_endpoint_fills_edge_labels(test_client: TestClient) -> None:
    response = test_client.get("/api/contexts/proj1/graph/neighbors/bob")
    assert response.status_code == 200
    edges = response.json()["edges"]
    assert len(edges) == 1
    assert edges[0]["data"]["source_label"] == "Alice"
    assert edges[0]["data"]["target_label"] == "Bob"


def test_dismissing_approved_suggestion_is_a_no_op(test_client: TestClient) -> None:
    test_client.post("/api/contexts/proj1/suggestions/1/approve")

    response = test_client.post("/api/contexts/proj1/suggestions/1/dismiss")
    assert response.status_code == 200
    assert response.json()["dismissed"] is False
    assert response.json()["suggestion"]["status"] == "approved"

    approved = test_client.get("/api/contexts/proj1/suggestions?status=approved").json()
    assert approved["total"] == 1


def test_archive_and_restore_update_cached_graph(test_client: TestClient) -> None:
    assert len(test_client.get("/api/contexts/proj1/graph").json()["nodes"]) == 5

    response = test_client.post(
        "/api/contexts/proj1/actors/archive", json={"actor_ids": ["billing", "ghost"]}
    )
    assert response.status_code == 200
    assert response.json() == {"archived": 1}

    graph = test_client.get("/api/contexts/proj1/graph").json()
    assert "billing" not in {node["data"]["id"] for node in graph["nodes"]}

    archived = test_client.get("/api/contexts/proj1/actors/archived").json()
    assert [actor["id"] for actor in archived["archived_actors"]] == ["billing"]
    assert archived["count"] == 1
    assert test_client.get("/api/contexts/proj1/actors").json()["count"] == 4

    response = test_client.post(
        "/api/contexts/proj1/actors/restore", json={"actor_ids": ["billing", "dave"]}
    )
    assert response.json() == {"restored": 1}
    assert len(test_client.get("/api/contexts/proj1/graph").json()["nodes"]) == 5


def test_archive_requires_actor_ids(test_client: TestClient) -> None:
    response = test_client.post("/api/contexts/proj1/actors/archive", json={"actor_ids": []})
    assert response.status_code == 422


def test_stale_actors_endpoint(test_client: TestClient) -> None:
    response = test_client.get("/api/contexts/proj1/actors/stale?days=30")
    assert response.status_code == 200
    assert response.json() == {"stale_actors": [], "threshold": 30, "count": 0}
    assert test_client.get("/api/contexts/proj1/actors/stale?days=-1").status_code == 422


def test_relationship_writes_update_cached_graph(test_client: TestClient) -> None:
    path_url = "/api/contexts/proj1/graph/path/bob/dave"
    assert test_client.get(path_url).json()["found"] is False

    response = test_client.post(
        "/api/contexts/proj1/relationships",
        json={
            "source_actor_id": "bob",
            "target_actor_id": "dave",
            "relationship_type": "mentors",
            "context": "Bob mentors Dave",
        },
    )
    assert response.status_code == 200
    relationship_id = response.json()["id"]
    assert response.json()["relationship_type"] == "mentors"

    assert test_client.get(path_url).json() == {"path": ["bob", "dave"], "found": True}
    listed = test_client.get("/api/contexts/proj1/relationships").json()
    assert listed["total"] == 2

    response = test_client.delete(f"/api/contexts/proj1/relationships/{relationship_id}")
    assert response.json() == {"deleted": True}
    assert test_client.get(path_url).json()["found"] is False

    response = test_client.delete(f"/api/contexts/proj1/relationships/{relationship_id}")
    assert response.json() == {"deleted": False}


def test_add_relationship_validation(test_client: TestClient) -> None:
    url = "/api/contexts/proj1/relationships"
    unknown = {"source_actor_id": "bob", "target_actor_id": "ghost", "relationship_type": "owns"}
    assert test_client.post(url, json=unknown).status_code == 404

    self_loop = {"source_actor_id": "bob", "target_actor_id": "bob", "relationship_type": "owns"}
    assert test_client.post(url, json=self_loop).status_code == 422
