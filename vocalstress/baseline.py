"""
VocalStress v1 Baseline Estimator.

Responsibilities:
- Collect the first N voiced F0 values and freeze the F0 baseline
- Collect the first N spectral snapshots and freeze the spectral baseline

Invariants:
- Each baseline is computed exactly once per session
- Nothing is collected after a baseline is frozen
- An unestablished baseline is None, never an error
"""

import logging

import numpy as np

from vocalstress.contracts import Baseline, SpectralBaseline, SpectralSnapshot

logger = logging.getLogger(__name__)


class BaselineEstimator:
    """Accumulates speaker baselines from the start of a session."""

    def __init__(self, required: int):
        self.required = required
        self._f0_values: list[float] = []
        self._spectral_values: list[SpectralSnapshot] = []
        self.baseline: Baseline | None = None
        self.spectral_baseline: SpectralBaseline | None = None

    @property
    def established(self) -> bool:
        """True once the F0 baseline is frozen."""
        return self.baseline is not None

    @property
    def f0_progress(self) -> int:
        """Number of F0 values collected toward the baseline."""
        return self.required if self.established else len(self._f0_values)

    def add_f0(self, f0: float) -> bool:
        """
        Offer a voiced F0 value.

        Returns:
            True only on the call that establishes the baseline.
        """
        if self.baseline is not None:
            return False

        self._f0_values.append(f0)
        if len(self._f0_values) < self.required:
            return False

        values = np.asarray(self._f0_values, dtype=np.float64)
        self.baseline = Baseline(mean_f0=float(np.mean(values)), sd_f0=float(np.std(values)))
        self._f0_values = []
        logger.info(
            "F0 baseline established: mean=%.1f Hz sd=%.1f Hz (%d samples)",
            self.baseline.mean_f0,
            self.baseline.sd_f0,
            self.required,
        )
        return True

    def add_spectral(self, snapshot: SpectralSnapshot) -> bool:
        """
        Offer a spectral snapshot.

        Returns:
            True only on the call that establishes the spectral baseline.
        """
        if self.spectral_baseline is not None:
            return False

        self._spectral_values.append(snapshot)
        if len(self._spectral_values) < self.required:
            return False

        self.spectral_baseline = SpectralBaseline(
            centroid=float(np.mean([s.centroid for s in self._spectral_values])),
            hammarberg=float(np.mean([s.hammarberg for s in self._spectral_values])),
        )
        self._spectral_values = []
        logger.info(
            "Spectral baseline established: centroid=%.0f Hz hammarberg=%.1f dB",
            self.spectral_baseline.centroid,
            self.spectral_baseline.hammarberg,
        )
        return True

    def reset(self) -> None:
        """Discard collected values and both baselines."""
        self._f0_values = []
        self._spectral_values = []
        self.baseline = None
        self.spectral_baseline = None
