"""
Telemetry recording and export for RotorSim.
"""

from .telemetry import RotorSnapshot, RotorTelemetryLogger

__all__ = ["RotorSnapshot", "RotorTelemetryLogger"]
