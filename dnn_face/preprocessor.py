"""
Preprocessing for the face detection pipeline.

Responsibility:
    Convert a BGR frame (numpy array) into a 4D DNN input blob using
    cv2.dnn.blobFromImage.

Non-goals:
    - No frame acquisition or I/O.
    - No resizing: a frame whose size differs from the network input
      size would not line up with the priors, so it is rejected.

Hard-coded:
    - Channel order is BGR, no mean subtraction, no scaling
      (the network was trained on raw BGR pixels).
"""

from typing import Tuple

import cv2
import numpy as np


def preprocess(frame: np.ndarray, input_size: Tuple[int, int]) -> np.ndarray:
    """Convert a BGR frame into a DNN input blob.

    Args:
        frame: Input image as a BGR numpy array (H, W, 3).
        input_size: Expected (width, height) of the frame.

    Returns:
        A 4D float32 array of shape (1, 3, H, W).

    Raises:
        TypeError: If frame is not a numpy ndarray.
        ValueError: If the frame is empty, not 3-channel, or not input_size.
    """
    if frame is None or not isinstance(frame, np.ndarray):
        raise TypeError(
            f"Expected frame to be a numpy ndarray, got {type(frame).__name__}."
        )

    if frame.size == 0:
        raise ValueError(
            "Cannot preprocess an empty frame. "
            "Ensure the input source is providing valid frames."
        )

    if frame.ndim != 3 or frame.shape[2] != 3:
        raise ValueError(
            f"Expected a 3-channel BGR frame (H, W, 3), got shape {frame.shape}."
        )

    height, width = frame.shape[:2]
    if (width, height) != tuple(input_size):
        raise ValueError(
            f"Frame size {width}x{height} does not match the detector input size "
            f"{input_size[0]}x{input_size[1]}. Resize the frame or call "
            f"set_input_size() first."
        )

    return cv2.dnn.blobFromImage(frame, scalefactor=1.0, swapRB=False, crop=False)
