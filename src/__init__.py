"""
Vision Overlay Engine

Procedural overlays that simulate vision conditions on top of a live
image or video feed. Every condition is driven by an intensity and a
timestamp and deterministically produces a composited description of
that instant.

Top Priorities (strict order):
1. Never break the underlying stream (no exception reaches the host)
2. Deterministic output for (condition, intensity, time, params)
3. Every alpha and opacity bounded in [0, 1]
4. Temporal continuity (phases are functions of time, never accumulated)
"""

__version__ = "0.1.0"
__author__ = "Vision Overlay Engine Team"
