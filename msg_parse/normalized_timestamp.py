"""Epoch seconds plus optional sub-second microseconds"""
import time
from typing import Any, Dict, Optional


class NormalizedTimestamp:
    """Epoch seconds (UTC) plus optional sub-second microseconds"""

    def __init__(self, seconds: int, microseconds: Optional[int] = None):
        self.seconds = seconds
        self.microseconds = microseconds

    @staticmethod
    def current() -> 'NormalizedTimestamp':
        """Wall-clock fallback used whenever a message carries no usable timestamp"""
        return NormalizedTimestamp(int(time.time()), None)

    def to_dict(self) -> Dict[str, Any]:
        return {'sec': self.seconds, 'usec': self.microseconds}

    def __eq__(self, other):
        if not isinstance(other, NormalizedTimestamp):
            return NotImplemented
        return self.seconds == other.seconds and self.microseconds == other.microseconds

    def __repr__(self):
        return f"NormalizedTimestamp(seconds={self.seconds}, microseconds={self.microseconds})"
