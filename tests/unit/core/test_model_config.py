# tests/unit/core/test_model_config.py
import json

import pytest

from embeddy.core.domain.entities import ModelConfig, ModelInfo
from embeddy.core.domain.errors import ModelLoadFailed


@pytest.mark.parametrize(
    "raw,expected_dim",
    [
        ({"hidden_size": 384}, 384),
        ({"n_embd": 768}, 768),
        ({"dim": 512}, 512),
        ({"hidden_size": 384, "n_embd": 768, "dim": 512}, 384),
        ({"n_embd": 768, "dim": 512}, 768),
        ({"hidden_size": None, "dim": 512}, 512),
    ],
)
def test_embedding_dim_precedence(raw, expected_dim):
    assert ModelConfig.from_dict(raw).embedding_dim == expected_dim


def test_auxiliary_fields_default_when_absent():
    config = ModelConfig.from_dict({"hidden_size": 8})
    assert config.model_type == "bert"
    assert config.num_hidden_layers == 12
    assert config.num_attention_heads == 12


def test_gpt2_style_auxiliary_keys():
    config = ModelConfig.from_dict(
        {"model_type": "gpt2", "n_embd": 16, "n_layer": 4, "n_head": 2}
    )
    assert (config.model_type, config.num_hidden_layers, config.num_attention_heads) == (
        "gpt2",
        4,
        2,
    )


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"vocab_size": 30522},
        {"hidden_size": "384"},
        {"hidden_size": 0},
        {"hidden_size": True},
    ],
)
def test_missing_or_invalid_dim_fails(raw):
    with pytest.raises(ModelLoadFailed, match="Could not determine embedding dimension"):
        ModelConfig.from_dict(raw)


def test_non_object_config_fails():
    with pytest.raises(ModelLoadFailed, match="expected a JSON object"):
        ModelConfig.from_dict([1, 2, 3])


def test_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"hidden_size": 32, "model_type": "llama"}))
    config = ModelConfig.from_file(path)
    assert config.embedding_dim == 32
    assert config.model_type == "llama"


def test_from_file_missing_and_malformed(tmp_path):
    with pytest.raises(ModelLoadFailed, match="Failed to read config"):
        ModelConfig.from_file(tmp_path / "nope.json")

    bad = tmp_path / "config.json"
    bad.write_text("{not json")
    with pytest.raises(ModelLoadFailed, match="Failed to parse config"):
        ModelConfig.from_file(bad)


def test_model_info_key_prefers_alias(tmp_path):
    plain = ModelInfo(name="org/m", hf_repo_id="org/m", model_path=tmp_path)
    aliased = ModelInfo(name="org/m", hf_repo_id="org/m", model_path=tmp_path, alias="m")
    assert plain.key == "org/m"
    assert aliased.key == "m"


def test_from_file_not_utf8(tmp_path):
    path = tmp_path / "config.json"
    path.write_bytes(b'{"hidden_size": 3, "x": "\xff\xfe"}')
    with pytest.raises(ModelLoadFailed, match="Failed to parse config"):
        ModelConfig.from_file(path)
