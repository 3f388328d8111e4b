import json

import pytest


def test_substitute_env_expands_known_variables_and_keeps_unknown():
    from backend.toi.config import substitute_env

    doc = {
        "headers": {"Authorization": "Bearer $API_KEY"},
        "urls": ["http://${HOST}:8000", "$MISSING"],
        "retries": 3,
    }
    out = substitute_env(doc, {"API_KEY": "secret", "HOST": "models.local"})
    assert out["headers"]["Authorization"] == "Bearer secret"
    assert out["urls"] == ["http://models.local:8000", "$MISSING"]
    assert out["retries"] == 3


def test_load_toi_config_reads_json_with_env(tmp_path, monkeypatch):
    from backend.toi.config import load_toi_config

    monkeypatch.setenv("GEN_KEY", "k-123")
    path = tmp_path / "toi.json"
    path.write_text(
        json.dumps(
            {
                "server": {"bind_addr": "0.0.0.0:7000", "distance_threshold": 0.6},
                "embedding": {"base_url": "http://e", "json": {"model": "embed"}},
                "generation": {"base_url": "http://g", "headers": {"Authorization": "Bearer $GEN_KEY"}},
                "reranking": {"base_url": "http://r", "params": {"api-version": "2"}},
            }
        ),
        encoding="utf-8",
    )
    config = load_toi_config(path)
    assert config.server.port == 7000
    assert config.server.distance_threshold == 0.6
    assert config.server.similarity_threshold == 0.5
    assert config.embedding.json_ == {"model": "embed"}
    assert config.generation.headers["Authorization"] == "Bearer k-123"
    assert config.reranking.params == {"api-version": "2"}


def test_server_config_defaults():
    from backend.toi.config import DEFAULT_USER_AGENT, ServerConfig

    server = ServerConfig()
    assert server.bind_addr == "127.0.0.1:6969"
    assert server.port == 6969
    assert server.user_agent == DEFAULT_USER_AGENT
    assert server.distance_threshold == 0.75


def test_missing_model_section_is_rejected(tmp_path):
    from pydantic import ValidationError

    from backend.toi.config import load_toi_config

    path = tmp_path / "toi.json"
    path.write_text(json.dumps({"embedding": {"base_url": "http://e"}}), encoding="utf-8")
    with pytest.raises(ValidationError):
        load_toi_config(path)
