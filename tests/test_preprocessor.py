"""
Tests for the preprocessing module.
"""

import numpy as np
import pytest

from dnn_face.preprocessor import preprocess


def test_preprocess_valid_input():
    """Test standard preprocessing on a valid frame."""
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    frame[:, :, 1] = 255

    blob = preprocess(frame, (320, 240))

    assert isinstance(blob, np.ndarray)
    assert blob.shape == (1, 3, 240, 320)
    assert blob.dtype == np.float32


def test_preprocess_keeps_raw_bgr_values():
    """Test that no mean subtraction, scaling or channel swap happens."""
    frame = np.zeros((20, 30, 3), dtype=np.uint8)
    frame[:, :, 0] = 7
    frame[:, :, 2] = 200

    blob = preprocess(frame, (30, 20))

    assert np.all(blob[0, 0] == 7.0)
    assert np.all(blob[0, 1] == 0.0)
    assert np.all(blob[0, 2] == 200.0)


def test_preprocess_empty_frame():
    """Test that preprocessing rejects empty frames."""
    with pytest.raises(ValueError):
        preprocess(np.zeros((0, 0, 3), dtype=np.uint8), (320, 320))


def test_preprocess_none_frame():
    """Test that preprocessing rejects None."""
    with pytest.raises(TypeError):
        preprocess(None, (320, 320))


def test_preprocess_wrong_channels():
    """Test that grayscale and BGRA frames are rejected."""
    with pytest.raises(ValueError, match="3-channel"):
        preprocess(np.zeros((100, 100), dtype=np.uint8), (100, 100))
    with pytest.raises(ValueError, match="3-channel"):
        preprocess(np.zeros((100, 100, 4), dtype=np.uint8), (100, 100))


def test_preprocess_size_mismatch():
    """Test that frames not matching the input size are rejected."""
    frame = np.zeros((200, 200, 3), dtype=np.uint8)

    with pytest.raises(ValueError, match="does not match"):
        preprocess(frame, (100, 100))
