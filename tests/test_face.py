"""
Tests for the Face data transfer objects.
"""

import numpy as np
import pytest

from dnn_face.face import ARRAY_COLUMNS, Face, Landmarks, faces_from_arrays, faces_to_array


def _face(score=0.95):
    return Face(
        box=(10.0, 20.0, 30.0, 40.0),
        landmarks=Landmarks(
            right_eye=(15.0, 30.0),
            left_eye=(35.0, 30.0),
            nose_tip=(25.0, 40.0),
            mouth_right=(18.0, 50.0),
            mouth_left=(32.0, 50.0),
        ),
        score=score,
    )


def test_face_properties():
    """Test box accessors."""
    face = _face()
    assert (face.x, face.y, face.width, face.height) == (10.0, 20.0, 30.0, 40.0)
    assert face.area == 1200.0


def test_face_is_frozen():
    """Test that faces cannot be mutated."""
    face = _face()
    with pytest.raises(AttributeError):
        face.score = 0.1


def test_to_array_layout():
    """Test the 15-value row layout."""
    row = _face().to_array()

    assert row.shape == (len(ARRAY_COLUMNS),)
    np.testing.assert_allclose(
        row,
        [10, 20, 30, 40, 15, 30, 35, 30, 25, 40, 18, 50, 32, 50, 0.95],
        rtol=1e-6,
    )


def test_faces_to_array():
    """Test stacking, including the empty case."""
    assert faces_to_array([]).shape == (0, 15)
    assert faces_to_array([_face(), _face(0.5)]).shape == (2, 15)


def test_to_dict():
    """Test the JSON-ready representation."""
    data = _face(0.123456).to_dict()

    assert data["box"] == [10.0, 20.0, 30.0, 40.0]
    assert data["landmarks"]["nose_tip"] == [25.0, 40.0]
    assert data["score"] == 0.1235


def test_faces_from_arrays():
    """Test wrapping decoded arrays into faces."""
    boxes = np.array([[1, 2, 3, 4]], dtype=np.float32)
    landmarks = np.arange(10, dtype=np.float32).reshape(1, 5, 2)
    scores = np.array([0.75], dtype=np.float32)

    (face,) = faces_from_arrays(boxes, landmarks, scores)

    assert face.box == (1.0, 2.0, 3.0, 4.0)
    assert face.landmarks.right_eye == (0.0, 1.0)
    assert face.landmarks.mouth_left == (8.0, 9.0)
    assert isinstance(face.score, float)
