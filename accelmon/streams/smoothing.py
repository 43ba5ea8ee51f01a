"""
Display smoothing policies.

A policy chooses the exponential smoothing factor for a stream when its
calibration completes. The fixed policy suits the table view; the adaptive
policy (smoother for noisier devices) suits graph views.
"""

from abc import ABC, abstractmethod

from accelmon.core.config import SmoothingConfig, SmoothingPolicyName
from .models import CalibrationResult
from .numeric import clamp, linear_map


class SmoothingPolicy(ABC):
    """Chooses the smoothing factor (alpha) for a stream."""

    def __init__(self, config: SmoothingConfig):
        self.config = config

    @property
    def initial_alpha(self) -> float:
        """Alpha used before a stream's first calibration."""
        return self.config.alpha

    @abstractmethod
    def alpha_for(self, result: CalibrationResult) -> float:
        """Alpha to use after the given calibration."""

    def adjust(self, alpha: float, steps: int) -> float:
        """
        Shift an alpha by whole adjustment steps.

        Negative steps smooth more. The result stays within
        ``[alpha_min, adjust_ceiling]``.
        """
        shifted = alpha + steps * self.config.adjust_step
        return clamp(shifted, self.config.alpha_min, self.config.adjust_ceiling)


class FixedSmoothing(SmoothingPolicy):
    """Same alpha for every stream regardless of noise."""

    def alpha_for(self, result: CalibrationResult) -> float:
        return self.config.alpha


class AdaptiveSmoothing(SmoothingPolicy):
    """Alpha mapped linearly from the mean per-axis noise, clamped to [alpha_min, alpha_max]."""

    def alpha_for(self, result: CalibrationResult) -> float:
        cfg = self.config
        axis = result.axis_noise
        mean_noise = (axis.x + axis.y + axis.z) / 3
        alpha = linear_map(mean_noise, cfg.noise_low, cfg.noise_high, cfg.alpha_min, cfg.alpha_max)
        return clamp(alpha, cfg.alpha_min, cfg.alpha_max)


def build_smoothing_policy(config: SmoothingConfig) -> SmoothingPolicy:
    """Instantiate the policy named in the configuration."""
    if SmoothingPolicyName(config.policy) == SmoothingPolicyName.ADAPTIVE:
        return AdaptiveSmoothing(config)
    return FixedSmoothing(config)
