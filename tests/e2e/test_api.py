# tests/e2e/test_api.py
import pytest
from fastapi.testclient import TestClient

from embeddy.app.dependencies import get_model_cache
from embeddy.app.main import app
from embeddy.core.domain.errors import EmbeddingError, ModelLoadFailed, ModelNotFound


class DummyEmbedder:
    embedding_dim = 2

    def embed(self, texts):
        if "boom" in texts:
            raise EmbeddingError("Tokenizer produced no tokens; nothing to pool")
        return [[float(len(t)), 1.0] for t in texts]


class DummyCache:
    device = "cpu"

    def __init__(self):
        self.requested = []

    def loaded_models(self):
        return ["dummy"]

    def ensure_loaded(self, model_id):
        self.requested.append(model_id)
        if model_id == "missing":
            raise ModelNotFound(model_id)
        if model_id == "crash":
            raise RuntimeError("CUDA out of memory")
        if model_id == "broken":
            raise ModelLoadFailed("Could not find embedding weight tensor")
        return DummyEmbedder()


# ---------- dependency override ----------------------------------------------
dummy_cache = DummyCache()


@pytest.fixture(autouse=True)
def override_model_cache():
    app.dependency_overrides[get_model_cache] = lambda: dummy_cache
    yield
    app.dependency_overrides.pop(get_model_cache, None)


client = TestClient(app)


# ---------- tests -----------------------------------------------------------
def test_health():
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "loaded_models": ["dummy"], "device": "cpu"}


def test_embed_endpoint():
    resp = client.post("/api/embed", json={"model": "dummy", "input": ["ab", "abcd"]})
    assert resp.status_code == 200
    assert resp.json() == {
        "model": "dummy",
        "dimension": 2,
        "embeddings": [[2.0, 1.0], [4.0, 1.0]],
    }


def test_empty_input_is_400():
    resp = client.post("/api/embed", json={"model": "dummy", "input": []})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid input: Input cannot be empty"}


def test_unknown_model_is_404():
    resp = client.post("/api/embed", json={"model": "missing", "input": ["x"]})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Model not found: missing"}


def test_load_failure_is_500():
    resp = client.post("/api/embed", json={"model": "broken", "input": ["x"]})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to load model: Could not find embedding weight tensor"}


def test_embedding_failure_is_500():
    resp = client.post("/api/embed", json={"model": "dummy", "input": ["boom"]})
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Embedding error:")


def test_malformed_body_is_rejected():
    resp = client.post("/api/embed", json={"input": ["x"]})
    assert resp.status_code == 422


def test_unexpected_error_is_json_500():
    lenient_client = TestClient(app, raise_server_exceptions=False)
    resp = lenient_client.post("/api/embed", json={"model": "crash", "input": ["x"]})
    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == {"error": "Internal server error"}
