"""
Coarse orientation / unit correction for freshly decoded assets.

Content-blind: the same quarter turn is applied to every asset, and the
scale is only snapped when its magnitude is clearly out of range.  Not
idempotent; apply exactly once per asset.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from engine.scene import Node3D

logger = logging.getLogger(__name__)

YAW_CORRECTION = math.pi / 2.0

MIN_SCALE_MAGNITUDE = 0.1
MAX_SCALE_MAGNITUDE = 50.0
SMALL_ASSET_SCALE = (10.0, 10.0, 10.0)
LARGE_ASSET_SCALE = (0.1, 0.1, 0.1)


def normalize_orientation(node: Node3D) -> None:
    node.rotate_y(YAW_CORRECTION)

    magnitude = float(np.linalg.norm(node.scale))
    if magnitude < MIN_SCALE_MAGNITUDE:
        node.scale = SMALL_ASSET_SCALE
    elif magnitude > MAX_SCALE_MAGNITUDE:
        node.scale = LARGE_ASSET_SCALE

    logger.info(
        "model_orientation_corrected rotation_y=90deg scale_in=%.4f scale=%s",
        magnitude, np.round(node.scale, 4).tolist(),
    )
