"""
Recognition Result Dataclasses

Shared data structures returned by text recognizers.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from src.geometry import SourceRect


@dataclass
class TextBlock:
    """One recognised block (paragraph) of text."""
    text: str                            # Lines joined with "\n"
    bounding_box: Optional[SourceRect]   # None if the engine gave no box
    confidence: float = 1.0              # 0.0-1.0
    lines: List[str] = field(default_factory=list)


@dataclass
class RecognitionResult:
    """Complete recognition result for one image."""
    blocks: List[TextBlock]              # Recognition order
    processing_time_ms: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.blocks
