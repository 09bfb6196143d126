"""Static term and joke tables stored as JSON files.

Tables are read from disk on every lookup in a worker thread, so edits to
the files take effect without a restart and the event loop never blocks on
file I/O.
"""

from __future__ import annotations

import asyncio
import json
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from cricket_bot.utils.async_helpers import LookupMiss

log = structlog.get_logger()


@dataclass(frozen=True)
class JokeEntry:
    """One question/answer joke."""

    index: int
    question: str
    answer: str


def _read_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


class StaticTables:
    """Async access to the explainer and joke tables.

    Example:
        tables = StaticTables(explainers_path, jokes_path)
        definition = await tables.lookup_definition("Gully")
        joke = await tables.pick_joke()
    """

    def __init__(
        self,
        explainers_path: Path,
        jokes_path: Path,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the tables.

        Args:
            explainers_path: JSON list of ``{term, definition}`` records.
            jokes_path: JSON list of ``{question, answer}`` records.
            rng: Random source for joke selection. Defaults to a fresh Random.
        """
        self._explainers_path = explainers_path
        self._jokes_path = jokes_path
        self._rng = rng or random.Random()  # noqa: S311

    async def load_explainers(self) -> list[dict[str, str]]:
        """Read the term/definition table."""
        data: list[dict[str, str]] = await asyncio.to_thread(_read_json, self._explainers_path)
        return data

    async def load_jokes(self) -> list[dict[str, str]]:
        """Read the question/answer table."""
        data: list[dict[str, str]] = await asyncio.to_thread(_read_json, self._jokes_path)
        return data

    async def lookup_definition(self, term: str) -> str:
        """Return the first definition whose term equals ``term`` exactly.

        Args:
            term: Table key, already capitalized by the matcher.

        Returns:
            The definition text.

        Raises:
            LookupMiss: If no record has that term.
        """
        for record in await self.load_explainers():
            if record.get("term") == term and record.get("definition"):
                return record["definition"]

        raise LookupMiss(f"No definition for term {term!r}", key=term)

    def joke_index(self, table_size: int) -> int:
        """Choose a joke index uniformly from ``1..table_size - 1``.

        Index 0 is never selected.

        Raises:
            LookupMiss: If the table has no selectable entry.
        """
        if table_size < 2:
            raise LookupMiss("Joke table has no selectable entries", key=str(table_size))
        return self._rng.randint(1, table_size - 1)

    async def pick_joke(self) -> JokeEntry:
        """Pick a pseudorandom joke.

        Returns:
            The selected joke with its table index.

        Raises:
            LookupMiss: If the table is too small or the entry is incomplete.
        """
        jokes = await self.load_jokes()
        index = self.joke_index(len(jokes))
        record = jokes[index]
        log.debug("joke_selected", index=index)

        question = record.get("question")
        answer = record.get("answer")
        if not question or not answer:
            raise LookupMiss(f"Joke {index} is incomplete", key=str(index))

        return JokeEntry(index=index, question=question, answer=answer)
