"""
Ordered, read-only collection of quiz questions.
"""
import logging
import random
from typing import Iterator, Optional, Sequence, Tuple, Union

from .exceptions import EmptyInputError
from .models import QuestionRecord

logger = logging.getLogger(__name__)

RecordLike = Union[QuestionRecord, Tuple[str, str]]


class QuestionSet:
    """
    Questions in the order they will be asked.

    The order is fixed when the set is built: either the input order or one
    uniformly random permutation of it.
    """

    def __init__(self, records: Sequence[QuestionRecord]):
        self._records: Tuple[QuestionRecord, ...] = tuple(records)

    @classmethod
    def build(
        cls,
        records: Sequence[RecordLike],
        shuffle: bool = False,
        rng: Optional[random.Random] = None
    ) -> "QuestionSet":
        """
        Build a question set from prompt/answer pairs.

        Args:
            records: Sequence of (prompt, answer) pairs or QuestionRecords
            shuffle: Whether to randomly permute the records
            rng: Random source used for shuffling, a fresh one if omitted

        Returns:
            New QuestionSet

        Raises:
            EmptyInputError: If records is empty
        """
        if not records:
            raise EmptyInputError("Cannot build a question set from an empty list of records")

        ordered = [cls._to_record(item) for item in records]

        if shuffle:
            if rng is None:
                rng = random.Random()
            # random.shuffle is a Fisher-Yates shuffle: every permutation is equally likely
            rng.shuffle(ordered)
            logger.debug(f"Shuffled {len(ordered)} questions")

        return cls(ordered)

    @staticmethod
    def _to_record(item: RecordLike) -> QuestionRecord:
        if isinstance(item, QuestionRecord):
            return item
        prompt, answer = item
        return QuestionRecord(prompt=prompt, correct_answer=answer)

    @property
    def records(self) -> Tuple[QuestionRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[QuestionRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> QuestionRecord:
        return self._records[index]

    def __repr__(self) -> str:
        return f"QuestionSet({len(self._records)} questions)"
