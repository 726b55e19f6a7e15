"""
Scenecut - storyboard and pre-production planning toolkit.

Assembles an ordered sequence of scenes, renders scene images with
continuity from the previous shot, and exports the result for an NLE:
sequence model → continuity-aware image generation → timeline export
(EDL, FCPXML, SRT, DaVinci Resolve import script) → zip pack.
"""

__version__ = "0.1.0"
