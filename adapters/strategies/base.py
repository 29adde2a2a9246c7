"""Base detection strategy class.

Re-exports BaseDetectionStrategy from adapters.base for convenience.
"""

from adapters.base import BaseDetectionStrategy, DetectionCandidate, DetectionContext

__all__ = ["BaseDetectionStrategy", "DetectionCandidate", "DetectionContext"]
