"""
Answer options derived from the active prompt.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnswerOption:
    """
    One tappable answer for the active prompt.

    presented_at_ms is only used for response latency metrics.
    """
    answer_id: str
    prompt_id: str
    word: str
    index: int
    is_correct: bool
    presented_at_ms: int = 0
