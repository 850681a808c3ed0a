"""Stitcher - asynchronous vertical video assembly from timed images and audio."""

__version__ = "0.1.0"
