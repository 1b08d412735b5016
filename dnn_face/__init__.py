"""
dnn_face — anchor-based face detection post-processing on OpenCV DNN.

Public API:
    - FaceDetector: The single entry point for face detection.
    - Face, Landmarks: Data transfer objects for a detected face.
    - InferenceEngine: Protocol a custom inference backend must satisfy.
    - ShapeMismatchError: Raised when network outputs do not match the priors.

The lower-level building blocks (priors, decoder, suppressor) are
importable from their modules for callers running their own inference.

Usage:
    from dnn_face import FaceDetector

    detector = FaceDetector.create("models/face_detection_yunet_2022mar.onnx", 320, 320)
    faces = detector.detect(frame)
"""

from dnn_face.decoder import ShapeMismatchError
from dnn_face.detector import FaceDetector
from dnn_face.engine import InferenceEngine, OpenCVEngine
from dnn_face.face import Face, Landmarks

__all__ = [
    "FaceDetector",
    "Face",
    "Landmarks",
    "InferenceEngine",
    "OpenCVEngine",
    "ShapeMismatchError",
]
