"""
Base interface for spectral transforms.
"""

from abc import ABC, abstractmethod

import numpy as np


class SpectralTransform(ABC):
    """
    Abstract base class for the FFT backend of the frame analyzer.

    The numpy, scipy and torch strategies all implement this interface,
    allowing them to be used interchangeably: the fingerprint only depends
    on the magnitude values, which agree within floating-point tolerance.
    """

    @abstractmethod
    def magnitude(self, windowed_frame: np.ndarray) -> np.ndarray:
        """
        Forward real-to-complex transform of one windowed frame.

        Args:
            windowed_frame: 1D float array of length n (already multiplied by the window)

        Returns:
            1D float32 array with the magnitude of bins 0..n/2 (n/2 + 1 values)
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this transform strategy."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
