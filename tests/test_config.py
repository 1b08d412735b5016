"""
Tests for the configuration module.
"""

import pytest

from dnn_face.config import (
    AppConfig,
    DetectionConfig,
    ModelConfig,
    OutputConfig,
    _validate,
    load_config,
)


def test_load_defaults():
    """Test loading configuration without any file."""
    config = load_config(None)
    assert isinstance(config, AppConfig)
    assert config.model.input_size == (320, 320)
    assert config.model.backend == "default"
    assert config.detection.score_threshold == 0.9
    assert config.detection.nms_threshold == 0.3
    assert config.detection.top_k == 5000


def test_validation_failure():
    """Test fail-fast validation."""
    bad_config = AppConfig(detection=DetectionConfig(score_threshold=1.5))
    with pytest.raises(ValueError, match="score_threshold"):
        _validate(bad_config)

    bad_config = AppConfig(detection=DetectionConfig(top_k=-1))
    with pytest.raises(ValueError, match="top_k"):
        _validate(bad_config)

    bad_config = AppConfig(model=ModelConfig(backend="invalid"))
    with pytest.raises(ValueError, match="backend"):
        _validate(bad_config)

    bad_config = AppConfig(model=ModelConfig(target="tpu"))
    with pytest.raises(ValueError, match="target"):
        _validate(bad_config)

    bad_config = AppConfig(model=ModelConfig(input_size=(0, 320)))
    with pytest.raises(ValueError, match="input_size"):
        _validate(bad_config)

    bad_config = AppConfig(output=OutputConfig(mode="print,display"))
    with pytest.raises(ValueError, match="output.mode"):
        _validate(bad_config)


def test_env_override(monkeypatch):
    """Test environment variable overrides."""
    monkeypatch.setenv("DNN_FACE_DETECTION_SCORE_THRESHOLD", "0.6")
    monkeypatch.setenv("DNN_FACE_DETECTION_TOP_K", "100")
    monkeypatch.setenv("DNN_FACE_MODEL_BACKEND", "cuda")
    monkeypatch.setenv("DNN_FACE_MODEL_INPUT_SIZE", "640x480")

    config = load_config(None)

    assert config.detection.score_threshold == 0.6
    assert config.detection.top_k == 100
    assert config.model.backend == "cuda"
    assert config.model.input_size == (640, 480)


def test_env_input_size_uppercase_separator(monkeypatch):
    """Test that "640X480" parses like "640x480"."""
    monkeypatch.setenv("DNN_FACE_MODEL_INPUT_SIZE", "640X480")

    assert load_config(None).model.input_size == (640, 480)


def test_yaml_file_with_env_precedence(tmp_path, monkeypatch):
    """Test that YAML values load and environment variables win over them."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "model:\n"
        "  input_size: [160, 120]\n"
        "  target: CPU\n"
        "detection:\n"
        "  score_threshold: 0.7\n"
        "  nms_threshold: 0.4\n"
        "output:\n"
        "  mode: save_json\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("DNN_FACE_DETECTION_NMS_THRESHOLD", "0.5")

    config = load_config(str(path))

    assert config.model.input_size == (160, 120)
    assert config.model.target == "cpu"
    assert config.detection.score_threshold == 0.7
    assert config.detection.nms_threshold == 0.5
    assert config.output.mode == "save_json"


def test_missing_config_file(tmp_path):
    """Test that a missing config file fails loudly."""
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))
