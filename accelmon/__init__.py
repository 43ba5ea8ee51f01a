"""
AccelMon - a multi-stream accelerometer motion monitor.

Sensors report acceleration samples over a line-oriented serial protocol.
Each stream is calibrated against its own resting baseline and noise, and
its deviation from that baseline is classified into one of six motion levels
with hysteresis.

Features:
- Per-stream calibration with quality grading
- Noise-adaptive deadzone and motion thresholds
- Bounded-latency ingestion with backlog purging
- Typed events on an async event bus
"""

__version__ = "1.0.0"
