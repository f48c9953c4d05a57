"""
Content Sources - Supply rhyme prompts to the round engine.

The engine only needs get_random_prompt(). A source may fail at any
time; the engine treats ContentUnavailableError as "no prompt this
cycle" and carries on.
"""

import logging
import random
from pathlib import Path
from typing import Optional, Protocol, Sequence

from pydantic import ValidationError

from models.schemas import Prompt, PromptPack


logger = logging.getLogger(__name__)

DEFAULT_PROMPTS_PATH = Path(__file__).parent / "data" / "lyrics.json"


class ContentUnavailableError(RuntimeError):
    """Raised when a content source cannot supply a prompt."""


class ContentSource(Protocol):
    """Anything that can hand out prompts."""

    def get_random_prompt(self) -> Optional[Prompt]:
        ...


class SequenceContentSource:
    """
    Hands out prompts from a fixed list, in order, wrapping around.

    Useful for scripted rounds where the prompt sequence must be known.
    """

    def __init__(self, prompts: Sequence[Prompt], loop: bool = True):
        self._prompts = list(prompts)
        self._loop = loop
        self._index = 0

    def get_random_prompt(self) -> Prompt:
        if not self._prompts:
            raise ContentUnavailableError("No prompts configured")
        if self._index >= len(self._prompts):
            if not self._loop:
                raise ContentUnavailableError("Prompt sequence exhausted")
            self._index = 0
        prompt = self._prompts[self._index]
        self._index += 1
        return prompt


class JsonContentSource:
    """
    Picks prompts at random from a JSON prompt pack.

    Usage:
        source = JsonContentSource(seed=7)
        prompt = source.get_random_prompt()
    """

    def __init__(self, path: Path = DEFAULT_PROMPTS_PATH, seed: Optional[int] = None):
        self.path = Path(path)
        self._rng = random.Random(seed)
        self._pack: Optional[PromptPack] = None

    @property
    def prompts(self) -> list[Prompt]:
        return list(self._load().prompts)

    def _load(self) -> PromptPack:
        if self._pack is None:
            try:
                raw = self.path.read_text(encoding="utf-8")
            except OSError as exc:
                raise ContentUnavailableError(f"Cannot read prompt pack {self.path}: {exc}") from exc
            try:
                self._pack = PromptPack.model_validate_json(raw)
            except ValidationError as exc:
                raise ContentUnavailableError(f"Invalid prompt pack {self.path}: {exc}") from exc
            logger.info("Loaded %d prompts from %s", len(self._pack.prompts), self.path)
        return self._pack

    def get_random_prompt(self) -> Prompt:
        pack = self._load()
        if not pack.prompts:
            raise ContentUnavailableError(f"Prompt pack {self.path} is empty")
        return self._rng.choice(pack.prompts)
