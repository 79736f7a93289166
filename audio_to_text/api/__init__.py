"""
API module boundary for audio-to-text.

Design intent:
- Expose transcription over HTTP without duplicating orchestration logic.
"""
