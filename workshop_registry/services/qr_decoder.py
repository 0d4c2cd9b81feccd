"""Decode QR payloads from camera frames."""
import logging
from typing import Optional

import cv2
import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

_detector = cv2.QRCodeDetector()


def decode_frame(frame: np.ndarray) -> Optional[str]:
    """
    Decode the first QR code in a BGR frame.

    Args:
        frame: Image array as delivered by av.VideoFrame.to_ndarray(format="bgr24")

    Returns:
        The decoded text (trimmed), or None if no readable code is in the frame
    """
    if frame is None or frame.size == 0:
        return None

    if frame.ndim == 3 and frame.shape[2] == 4:
        frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)

    try:
        text, points, _ = _detector.detectAndDecode(frame)
    except cv2.error as e:
        logger.debug("QR detector failed on frame: %s", e)
        return None

    if points is None or not text:
        return None
    return text.strip()


def decode_image(image: Image.Image) -> Optional[str]:
    """Decode a QR code from a PIL image (uploads, tests)."""
    rgb = np.asarray(image.convert("RGB"), dtype=np.uint8)
    bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    return decode_frame(np.ascontiguousarray(bgr))
