"""
Memory management utilities for page region rendering.
"""

import gc
import logging
import os
from contextlib import contextmanager
from typing import Optional

import psutil

logger = logging.getLogger(__name__)


class MemoryManager:
    """Memory usage monitoring around raster work."""

    def __init__(self, max_memory_mb: Optional[float] = None):
        self.max_memory_mb = max_memory_mb or (psutil.virtual_memory().total / (1024 * 1024) * 0.8)  # 80% of total RAM
        self.process = psutil.Process(os.getpid())

    def get_memory_usage_mb(self) -> float:
        """Get current memory usage in MB."""
        return self.process.memory_info().rss / (1024 * 1024)

    def is_memory_limit_exceeded(self) -> bool:
        """Check if memory usage exceeds the limit."""
        return self.get_memory_usage_mb() > self.max_memory_mb

    def force_garbage_collection(self) -> None:
        """Force garbage collection to free memory."""
        gc.collect()

    @contextmanager
    def memory_guard(self, operation_name: str = "operation"):
        """Context manager to monitor memory usage during operations."""
        initial_memory = self.get_memory_usage_mb()
        try:
            yield
        finally:
            final_memory = self.get_memory_usage_mb()
            memory_delta = final_memory - initial_memory
            if memory_delta > 50:  # More than 50MB increase
                logger.debug(f"{operation_name} grew memory by {memory_delta:.1f}MB")
                self.force_garbage_collection()
            if self.is_memory_limit_exceeded():
                logger.warning(f"Memory limit exceeded after {operation_name}: {final_memory:.1f}MB")
                self.force_garbage_collection()


def cap_render_scale(width: float, height: float, scale: float, max_dim: int) -> float:
    """Largest scale <= requested that keeps the rendered image within max_dim.

    Args:
        width: Region width in page units
        height: Region height in page units
        scale: Requested supersampling factor
        max_dim: Maximum pixel dimension of the output

    Returns:
        Effective scale factor
    """
    longest = max(width, height)
    if longest <= 0:
        return scale
    if longest * scale <= max_dim:
        return scale
    capped = max_dim / longest
    logger.debug(f"Render scale capped from {scale:.2f} to {capped:.2f}")
    return capped
