"""
Face data transfer objects.

This module defines the Face and Landmarks dataclasses, the output types
returned by FaceDetector.detect(). They are frozen, serializable
containers with no behavior beyond data access and conversion.

Non-goals:
    - No rendering logic.
    - No file I/O.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]

# Column layout of Face.to_array(), matching the 15-value rows the
# network post-processing has always produced.
ARRAY_COLUMNS = (
    "x", "y", "w", "h",
    "right_eye_x", "right_eye_y",
    "left_eye_x", "left_eye_y",
    "nose_tip_x", "nose_tip_y",
    "mouth_right_x", "mouth_right_y",
    "mouth_left_x", "mouth_left_y",
    "score",
)


@dataclass(frozen=True, slots=True)
class Landmarks:
    """Five facial landmarks in absolute pixel coordinates.

    "Right" and "left" are from the subject's point of view.
    """

    right_eye: Point
    left_eye: Point
    nose_tip: Point
    mouth_right: Point
    mouth_left: Point

    @classmethod
    def from_array(cls, points: np.ndarray) -> "Landmarks":
        """Build from a (5, 2) array in right eye, left eye, nose, mouth right, mouth left order."""
        return cls(*(
            (float(points[k, 0]), float(points[k, 1])) for k in range(5)
        ))

    def as_tuple(self) -> Tuple[Point, Point, Point, Point, Point]:
        return (self.right_eye, self.left_eye, self.nose_tip, self.mouth_right, self.mouth_left)

    def to_dict(self) -> dict:
        return {
            "right_eye": [round(v, 2) for v in self.right_eye],
            "left_eye": [round(v, 2) for v in self.left_eye],
            "nose_tip": [round(v, 2) for v in self.nose_tip],
            "mouth_right": [round(v, 2) for v in self.mouth_right],
            "mouth_left": [round(v, 2) for v in self.mouth_left],
        }


@dataclass(frozen=True, slots=True)
class Face:
    """A single detected face.

    Attributes:
        box: Bounding box as (x, y, w, h), top-left corner plus size, in pixels.
        landmarks: Five facial landmarks in pixels.
        score: Combined classification/IoU-quality score in [0.0, 1.0].

    Coordinates are not clamped; boxes near the border may extend past
    the image.
    """

    box: Tuple[float, float, float, float]
    landmarks: Landmarks
    score: float

    @property
    def x(self) -> float:
        return self.box[0]

    @property
    def y(self) -> float:
        return self.box[1]

    @property
    def width(self) -> float:
        return self.box[2]

    @property
    def height(self) -> float:
        return self.box[3]

    @property
    def area(self) -> float:
        """Bounding box area in pixels."""
        return self.width * self.height

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "box": [round(v, 2) for v in self.box],
            "landmarks": self.landmarks.to_dict(),
            "score": round(self.score, 4),
        }

    def to_array(self) -> np.ndarray:
        """Return the face as a 15-value float32 row (see ARRAY_COLUMNS)."""
        points = [c for point in self.landmarks.as_tuple() for c in point]
        return np.array([*self.box, *points, self.score], dtype=np.float32)


def faces_to_array(faces: Sequence[Face]) -> np.ndarray:
    """Stack faces into an (M, 15) float32 array. Empty input gives shape (0, 15)."""
    if not faces:
        return np.zeros((0, len(ARRAY_COLUMNS)), dtype=np.float32)
    return np.stack([face.to_array() for face in faces])


def faces_from_arrays(boxes: np.ndarray, landmarks: np.ndarray, scores: np.ndarray) -> List[Face]:
    """Wrap row-aligned decoded arrays into Face objects."""
    return [
        Face(
            box=tuple(float(v) for v in boxes[i]),
            landmarks=Landmarks.from_array(landmarks[i]),
            score=float(scores[i]),
        )
        for i in range(boxes.shape[0])
    ]
