import random
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from .config import settings
from .errors import InsufficientPairs
from .models import QuestionItem


# --- Strategy Pattern: Quiz Generators ---
class QuizGenerator(ABC):
    """Turns a lesson's word pairs into shuffled multiple-choice questions."""

    def __init__(self, rng: Optional[random.Random] = None, option_count: Optional[int] = None):
        self.rng = rng or random.Random()
        self.option_count = option_count or settings.OPTION_COUNT

    @abstractmethod
    def orient(self, term: str, translation: str) -> Tuple[str, str]:
        """Returns ``(prompt, correct_answer)`` for one word pair."""

    def generate(self, pairs: Dict[str, str]) -> List[QuestionItem]:
        if len(pairs) < self.option_count:
            raise InsufficientPairs(len(pairs), self.option_count)

        entries = list(pairs.items())
        self.rng.shuffle(entries)
        oriented = [self.orient(term, translation) for term, translation in entries]
        answers = [answer for _, answer in oriented]

        return [
            QuestionItem(
                prompt=prompt,
                correct_answer=answer,
                options=self._generate_options(answer, answers),
            )
            for prompt, answer in oriented
        ]

    def _generate_options(self, correct_answer: str, all_answers: List[str]) -> List[str]:
        """Correct answer plus distinct random distractors, shuffled."""
        # Sorted so a seeded rng gives repeatable output.
        distractors = sorted({a for a in all_answers if a != correct_answer})
        needed = self.option_count - 1
        if len(distractors) < needed:
            raise InsufficientPairs(len(distractors) + 1, self.option_count)

        options = [correct_answer] + self.rng.sample(distractors, needed)
        self.rng.shuffle(options)
        return options


class StandardQuizGenerator(QuizGenerator):
    """Prompt with the source term, ask for its translation."""

    def orient(self, term: str, translation: str) -> Tuple[str, str]:
        return term, translation


class ReverseQuizGenerator(QuizGenerator):
    """Prompt with the translation, ask for the source term."""

    def orient(self, term: str, translation: str) -> Tuple[str, str]:
        return translation, term


class QuizFactory:
    @staticmethod
    def create(reverse: bool = False, rng: Optional[random.Random] = None) -> QuizGenerator:
        if reverse:
            return ReverseQuizGenerator(rng)
        return StandardQuizGenerator(rng)


def generate(
    pairs: Dict[str, str], reverse: bool = False, rng: Optional[random.Random] = None
) -> List[QuestionItem]:
    return QuizFactory.create(reverse, rng).generate(pairs)
