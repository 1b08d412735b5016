"""
Tests for the suppressor module.
"""

import numpy as np
import pytest

from dnn_face.decoder import Candidates
from dnn_face.suppressor import box_iou, nms_indices, suppress


def _candidates(boxes, scores):
    boxes = np.asarray(boxes, dtype=np.float32)
    n = boxes.shape[0]
    landmarks = np.arange(n * 10, dtype=np.float32).reshape(n, 5, 2)
    return Candidates(boxes=boxes, landmarks=landmarks, scores=np.asarray(scores, dtype=np.float32))


def test_box_iou():
    """Test IoU for identical, half-overlapping, disjoint and empty boxes."""
    box = np.array([0, 0, 10, 10], dtype=np.float32)
    others = np.array([
        [0, 0, 10, 10],
        [5, 0, 10, 10],
        [20, 20, 5, 5],
    ], dtype=np.float32)

    iou = box_iou(box, others)

    assert iou[0] == pytest.approx(1.0)
    assert iou[1] == pytest.approx(50 / 150)
    assert iou[2] == 0.0
    assert box_iou(np.zeros(4), np.zeros((1, 4)))[0] == 0.0


@pytest.mark.parametrize("n", [0, 1])
def test_zero_or_one_candidate_unchanged(n):
    """Test that tiny inputs bypass thresholds entirely."""
    cand = _candidates(np.ones((n, 4)), [0.01] * n)

    out = suppress(cand, score_threshold=0.99, iou_threshold=0.0)

    assert out is cand


def test_identical_boxes_keep_highest():
    """Test that the lower-scoring duplicate is suppressed."""
    cand = _candidates([[10, 10, 50, 50], [10, 10, 50, 50]], [0.92, 0.97])

    out = suppress(cand, score_threshold=0.9, iou_threshold=0.3)

    assert len(out) == 1
    assert out.scores[0] == pytest.approx(0.97)
    np.testing.assert_array_equal(out.landmarks[0], cand.landmarks[1])


def test_disjoint_boxes_only_score_filtered():
    """Test that non-overlapping boxes are removed only by the score threshold."""
    boxes = [[i * 100, 0, 50, 50] for i in range(5)]
    scores = [0.95, 0.5, 0.99, 0.91, 0.2]
    cand = _candidates(boxes, scores)

    out = suppress(cand, score_threshold=0.9, iou_threshold=0.3)

    np.testing.assert_allclose(out.scores, [0.99, 0.95, 0.91])
    np.testing.assert_array_equal(out.boxes[:, 0], [200, 0, 300])


def test_score_threshold_is_inclusive():
    """Test that a score equal to the threshold is kept."""
    cand = _candidates([[0, 0, 10, 10], [100, 0, 10, 10]], [0.5, 0.25])

    out = suppress(cand, score_threshold=0.5, iou_threshold=0.3)

    assert len(out) == 1


def test_iou_threshold_boundary():
    """Test suppression on either side of the IoU threshold."""
    # IoU between these two is exactly 50 / 150.
    cand = _candidates([[0, 0, 10, 10], [5, 0, 10, 10]], [0.95, 0.94])

    kept = suppress(cand, score_threshold=0.9, iou_threshold=0.5)
    assert len(kept) == 2

    kept = suppress(cand, score_threshold=0.9, iou_threshold=0.2)
    assert len(kept) == 1


def test_greedy_chain():
    """Test that a box suppressed by the best box cannot suppress others."""
    # A overlaps B heavily, B overlaps C heavily, A and C are disjoint.
    boxes = [[0, 0, 10, 10], [4, 0, 10, 10], [10, 0, 10, 10]]
    cand = _candidates(boxes, [0.99, 0.98, 0.97])

    keep = nms_indices(cand.boxes, cand.scores, score_threshold=0.9, iou_threshold=0.3)

    assert keep.tolist() == [0, 2]


def test_top_k_limits_candidates():
    """Test that only the top_k best candidates are considered."""
    boxes = [[i * 100, 0, 50, 50] for i in range(4)]
    cand = _candidates(boxes, [0.91, 0.99, 0.95, 0.93])

    out = suppress(cand, score_threshold=0.9, iou_threshold=0.3, top_k=2)
    np.testing.assert_allclose(out.scores, [0.99, 0.95])

    out = suppress(cand, score_threshold=0.9, iou_threshold=0.3, top_k=0)
    assert len(out) == 4


def test_all_below_threshold():
    """Test that nothing survives when every score is too low."""
    cand = _candidates(np.ones((3, 4)), [0.0, 0.0, 0.0])

    out = suppress(cand)

    assert len(out) == 0
    assert out.landmarks.shape == (0, 5, 2)
