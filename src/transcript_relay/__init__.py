"""Transcription job orchestration and segmented translation relay."""

__version__ = "0.1.0"
