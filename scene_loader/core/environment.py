from __future__ import annotations

import logging

from engine.xr import XRServer

from ..schemas import EnvironmentMode

logger = logging.getLogger(__name__)


def detect_environment(xr_server: XRServer) -> EnvironmentMode:
    """Immersive only when the primary XR interface is registered and up.

    A pure query: callers take one snapshot per load session.
    """
    primary = xr_server.primary_interface
    if primary is not None and xr_server.is_registered(primary) and primary.is_initialized():
        mode = EnvironmentMode.immersive
    else:
        mode = EnvironmentMode.desktop
    logger.debug("environment_detected mode=%s", mode.value)
    return mode
