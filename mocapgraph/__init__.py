"""Acclaim ASF/AMC loading, forward kinematics, motion blending, motion graphs, and camera and mesh math."""

__version__ = "0.1.0"