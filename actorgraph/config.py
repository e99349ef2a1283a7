from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage settings
    store_path: str = "data/store.json"

    # Web server settings
    cors_origins: list[str] = ["*"]

    # Edge weights used when synthesizing the graph
    explicit_edge_weight: float = 0.5
    team_edge_weight: float = 0.25
    org_edge_weight: float = 0.15
    tag_edge_weight: float = 0.3
    tag_min_documents: int = 2

    # Suggestion ("simmering") settings
    max_context_samples: int = 5
    context_sample_chars: int = 500
    suggestion_min_confidence: float = 0.3  # observations below this are discarded
    strong_evidence_threshold: int = 3
    high_confidence_threshold: float = 0.7
    suggestion_list_limit: int = 50

    default_hub_limit: int = 10
    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
