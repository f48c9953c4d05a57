"""
Prompt Slot - The single active prompt and its tappable answers.
"""

import logging
from typing import Optional

from models.prompt import AnswerOption
from models.schemas import Prompt


logger = logging.getLogger(__name__)


class PromptSlot:
    """
    Holds at most one active prompt.

    Replacing the prompt swaps the whole answer set at once, and taking
    an answer closes the set, so a tap can only ever be evaluated once
    and answers from an older prompt are inert.
    """

    def __init__(self):
        self._prompt: Optional[Prompt] = None
        self._options: dict[str, AnswerOption] = {}
        self._generation = 0

    @property
    def prompt(self) -> Optional[Prompt]:
        return self._prompt

    @property
    def options(self) -> list[AnswerOption]:
        """Answers that can still be tapped, in display order."""
        return sorted(self._options.values(), key=lambda o: o.index)

    @property
    def is_open(self) -> bool:
        return bool(self._options)

    @property
    def generation(self) -> int:
        """Incremented every time the prompt is replaced or cleared."""
        return self._generation

    def replace(self, prompt: Prompt, now_ms: float = 0) -> list[AnswerOption]:
        """Make prompt the active one, deriving a fresh answer set."""
        self._generation += 1
        self._prompt = prompt
        self._options = {}
        for index, word in enumerate(prompt.options):
            option = AnswerOption(
                answer_id=f"{prompt.prompt_id}#{self._generation}-opt{index}",
                prompt_id=prompt.prompt_id,
                word=word,
                index=index,
                is_correct=(word == prompt.correct),
                presented_at_ms=int(now_ms),
            )
            self._options[option.answer_id] = option
        return self.options

    def clear(self) -> None:
        """Drop the active prompt, leaving nothing to answer."""
        self._generation += 1
        self._prompt = None
        self._options = {}

    def take(self, answer_id: str) -> Optional[AnswerOption]:
        """
        Claim an answer for evaluation.

        Returns:
            The tapped AnswerOption, or None if it is stale or already used.
            A successful take closes the current answer set.
        """
        option = self._options.get(answer_id)
        if option is None:
            logger.debug("Ignoring stale tap on %s", answer_id)
            return None
        self._options = {}
        return option
