"""Lightweight wall-clock timers for pipeline stages.

Provides:
    - timer(): Context manager for wall-clock timing with optional sink

Used to measure:
    - Density accumulation
    - Gaussian smoothing (the dominant cost for large sigma)
    - Colorization and blending

Without a sink, timings are logged at DEBUG level.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(
    name: str,
    sink: Optional[Callable[[str, float], None]] = None,
    sync_cuda: bool = False
):
    """Context manager for wall-clock timing.

    Parameters
    ----------
    name : str
        Timer name (for logging/display)
    sink : Optional[Callable[[str, float], None]]
        Optional callback(name, elapsed_seconds); if None, logs at DEBUG
    sync_cuda : bool
        Synchronize CUDA before reading the clock so asynchronous GPU work
        is included, default False

    Examples
    --------
    >>> timings = {}
    >>> with timer("smooth", sink=timings.__setitem__):
    ...     out = gaussian_smooth(density, 2.0, 60.0)
    >>> timings["smooth"]
    0.0412...
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        if sync_cuda:
            import torch
            if torch.cuda.is_available():
                torch.cuda.synchronize()
        elapsed = time.perf_counter() - start
        if sink is not None:
            sink(name, elapsed)
        else:
            logger.debug(f"{name}: {elapsed:.3f} s")
