"""
Non-maximum suppression over decoded face candidates.

Responsibility:
    Drop low-scoring candidates and greedily remove boxes overlapping a
    higher-scoring kept box.

Non-goals:
    - No decoding or coordinate transformation.
    - No class-aware suppression (there is a single face class).
"""

import logging

import numpy as np

from dnn_face.decoder import Candidates

logger = logging.getLogger(__name__)


def box_iou(box: np.ndarray, boxes: np.ndarray) -> np.ndarray:
    """IoU between one [x, y, w, h] box and an (M, 4) array of boxes.

    Pairs whose union is empty (both zero-area) have IoU 0.
    """
    box = np.asarray(box, dtype=np.float32)
    boxes = np.asarray(boxes, dtype=np.float32).reshape(-1, 4)

    xx1 = np.maximum(box[0], boxes[:, 0])
    yy1 = np.maximum(box[1], boxes[:, 1])
    xx2 = np.minimum(box[0] + box[2], boxes[:, 0] + boxes[:, 2])
    yy2 = np.minimum(box[1] + box[3], boxes[:, 1] + boxes[:, 3])

    inter = np.maximum(0.0, xx2 - xx1) * np.maximum(0.0, yy2 - yy1)
    union = box[2] * box[3] + boxes[:, 2] * boxes[:, 3] - inter

    iou = np.zeros_like(inter)
    np.divide(inter, union, out=iou, where=union > 0)
    return iou


def nms_indices(
    boxes: np.ndarray,
    scores: np.ndarray,
    score_threshold: float,
    iou_threshold: float,
    top_k: int = 0,
) -> np.ndarray:
    """Greedy NMS on [x, y, w, h] boxes.

    Args:
        boxes: (N, 4) boxes.
        scores: (N,) scores.
        score_threshold: Candidates scoring below this are dropped first.
        iou_threshold: A box is suppressed when its IoU with a kept box
                       is greater than this.
        top_k: Keep only the top_k best candidates before suppression.
               0 or negative means no cap.

    Returns:
        Indices of the kept boxes, in descending score order.
    """
    scores = np.asarray(scores)
    candidates = np.flatnonzero(scores >= score_threshold)
    order = candidates[np.argsort(-scores[candidates], kind="stable")]
    if top_k > 0:
        order = order[:top_k]

    keep = []
    while order.size > 0:
        i = int(order[0])
        keep.append(i)

        iou = box_iou(boxes[i], boxes[order[1:]])
        order = order[1:][iou <= iou_threshold]

    return np.asarray(keep, dtype=np.intp)


def suppress(
    candidates: Candidates,
    score_threshold: float = 0.9,
    iou_threshold: float = 0.3,
    top_k: int = 5000,
) -> Candidates:
    """Reduce decoded candidates to non-overlapping detections.

    Zero or one candidate is returned unchanged, without applying the
    score threshold.

    Returns:
        The kept candidates, best score first.
    """
    if len(candidates) <= 1:
        return candidates

    keep = nms_indices(
        candidates.boxes,
        candidates.scores,
        score_threshold=score_threshold,
        iou_threshold=iou_threshold,
        top_k=top_k,
    )

    logger.debug("NMS kept %d of %d candidates", len(keep), len(candidates))
    return candidates.take(keep)
