"""Hand landmark detection and background segmentation using MediaPipe."""

from __future__ import annotations

import cv2
import numpy as np

try:
    import mediapipe as mp
except ImportError:
    mp = None


def _require_mediapipe():
    if mp is None:
        raise ImportError(
            "mediapipe is required. Install with: pip install mediapipe"
        )


class HandDetector:
    """Extracts 21 3D hand landmarks per hand using MediaPipe Hands.

    Each landmark is (x, y, z) normalized to [0, 1] relative to image
    dimensions, in the camera's (unmirrored) frame. Mirroring into canvas
    space is the controller's job.
    """

    NUM_LANDMARKS = 21

    def __init__(
        self,
        max_hands: int = 2,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        _require_mediapipe()

        self.max_hands = max_hands
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    @classmethod
    def from_config(cls, config) -> HandDetector:
        return cls(
            max_hands=config.max_hands,
            model_complexity=config.model_complexity,
            min_detection_confidence=config.min_detection_confidence,
            min_tracking_confidence=config.min_tracking_confidence,
        )

    def detect(self, frame_rgb: np.ndarray) -> list[np.ndarray]:
        """Detect hands and return landmark arrays.

        Args:
            frame_rgb: RGB image as numpy array (H, W, 3), uint8.

        Returns:
            List of landmark arrays, each shape (21, 3). Empty if no hands.
        """
        results = self._hands.process(frame_rgb)

        if not results.multi_hand_landmarks:
            return []

        return [
            np.array(
                [[lm.x, lm.y, lm.z] for lm in hand_landmarks.landmark],
                dtype=np.float32,
            )
            for hand_landmarks in results.multi_hand_landmarks
        ]

    def close(self):
        """Release MediaPipe resources."""
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class SelfieSegmenter:
    """Person/background separation for the small camera preview.

    With blur enabled the background is Gaussian-blurred while the person
    (mask >= threshold) stays sharp.
    """

    PREVIEW_SIZE = (200, 150)

    def __init__(self, model_selection: int = 1, threshold: float = 0.5, blur_kernel: int = 21):
        _require_mediapipe()

        self.threshold = threshold
        self.blur_kernel = blur_kernel | 1  # must be odd
        self._segmenter = mp.solutions.selfie_segmentation.SelfieSegmentation(
            model_selection=model_selection,
        )

    def mask(self, frame_rgb: np.ndarray) -> np.ndarray:
        """Float mask (H, W) in [0, 1], high where a person is."""
        results = self._segmenter.process(frame_rgb)
        if results.segmentation_mask is None:
            return np.zeros(frame_rgb.shape[:2], dtype=np.float32)
        return results.segmentation_mask

    def preview(self, frame_rgb: np.ndarray, blur: bool = True) -> np.ndarray:
        """Return a downscaled RGB preview, background blurred if requested."""
        image = frame_rgb
        if blur:
            person = self.mask(frame_rgb) >= self.threshold
            blurred = cv2.GaussianBlur(frame_rgb, (self.blur_kernel, self.blur_kernel), 0)
            image = np.where(person[..., None], frame_rgb, blurred)
        return cv2.resize(image, self.PREVIEW_SIZE, interpolation=cv2.INTER_AREA)

    def close(self):
        self._segmenter.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
