"""
Unit tests for the PromptSlot.
"""

from engine.prompt_slot import PromptSlot
from models.schemas import Prompt


def make_prompt(prompt_id="p1"):
    return Prompt(
        prompt_id=prompt_id,
        text="I keep my flow cold like the winter ___",
        options=("snow", "sun", "sand"),
        correct="snow",
    )


class TestPromptSlot:
    """Tests for replacing, taking and clearing prompts."""

    def setup_method(self):
        self.slot = PromptSlot()

    def test_empty_slot(self):
        assert self.slot.prompt is None
        assert self.slot.options == []
        assert not self.slot.is_open

    def test_replace_derives_answer_set(self):
        options = self.slot.replace(make_prompt(), now_ms=1200)

        assert [o.word for o in options] == ["snow", "sun", "sand"]
        assert [o.is_correct for o in options] == [True, False, False]
        assert all(o.presented_at_ms == 1200 for o in options)
        assert self.slot.is_open

    def test_take_returns_option_once(self):
        option = self.slot.replace(make_prompt())[1]

        assert self.slot.take(option.answer_id) == option
        assert self.slot.take(option.answer_id) is None

    def test_take_closes_the_whole_set(self):
        first, second, _ = self.slot.replace(make_prompt())

        self.slot.take(first.answer_id)

        assert self.slot.take(second.answer_id) is None
        assert not self.slot.is_open

    def test_answers_from_replaced_prompt_are_stale(self):
        old = self.slot.replace(make_prompt("p1"))[0]

        self.slot.replace(make_prompt("p2"))

        assert self.slot.take(old.answer_id) is None

    def test_same_prompt_dealt_twice_gets_fresh_ids(self):
        old = self.slot.replace(make_prompt("p1"))[0]
        new = self.slot.replace(make_prompt("p1"))[0]

        assert old.answer_id != new.answer_id
        assert self.slot.take(old.answer_id) is None
        assert self.slot.take(new.answer_id) == new

    def test_clear_drops_prompt(self):
        option = self.slot.replace(make_prompt())[0]
        generation = self.slot.generation

        self.slot.clear()

        assert self.slot.prompt is None
        assert self.slot.take(option.answer_id) is None
        assert self.slot.generation == generation + 1
