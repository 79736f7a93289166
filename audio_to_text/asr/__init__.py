"""
Transcript assembly for audio-to-text.

Design intent:
- Keep text normalization independent from the browser and routing layers.
"""
