"""Text-to-speech conversion of text into WAV audio through a pluggable backend."""

__version__ = "1.6.4"
__all__ = ["__version__"]