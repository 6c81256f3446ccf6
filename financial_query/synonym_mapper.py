"""
Synonym Expansion Engine.

Rewrites domain shorthand in a question into the canonical phrases used by
the project data (``"gp"`` → ``"gross profit"``, ``"cash"`` → ``"cash flow"``)
before any matching happens.

Design decisions
----------------
* Matching is whole-word only: the question is lower-cased and split on
  whitespace, and each word is looked up in the table.
* Canonical phrases are inserted verbatim; their words are never looked up
  again within the same pass.
* A word already standing inside an occurrence of its own canonical phrase
  is left alone, which makes ``expand`` idempotent
  (``expand("cash flow") == "cash flow"``).
* The table is read-only.  Custom synonyms are merged once, at construction
  (``extra_synonyms``) or via ``load_custom_synonyms`` at pipeline start-up.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from financial_query.logging_setup import get_logger
from financial_query.normalizer import tokenize
from financial_query.vocabulary import SYNONYMS

logger = get_logger("synonym_mapper")


class SynonymExpander:
    """Dictionary-based word → canonical-phrase expander.

    Parameters
    ----------
    synonyms:
        Base table (defaults to the built-in ``vocabulary.SYNONYMS``).
    extra_synonyms:
        Optional additional entries merged in at construction time.
    """

    def __init__(
        self,
        synonyms: Optional[Mapping[str, str]] = None,
        extra_synonyms: Optional[Mapping[str, str]] = None,
    ) -> None:
        table: Dict[str, str] = {}
        for word, phrase in (synonyms if synonyms is not None else SYNONYMS).items():
            table[word.strip().lower()] = phrase.strip().lower()

        if extra_synonyms:
            for word, phrase in extra_synonyms.items():
                key = word.strip().lower()
                value = phrase.strip().lower()
                if " " in key:
                    raise ValueError(
                        f"Synonym key {word!r} must be a single word"
                    )
                if key in table and table[key] != value:
                    logger.warning(
                        "Overriding synonym %r: %r → %r", key, table[key], value
                    )
                table[key] = value

        self._dict = table
        # phrase → its words, for the idempotence check
        self._phrase_words: Dict[str, List[str]] = {
            phrase: phrase.split() for phrase in set(table.values())
        }

    # ------------------------------------------------------------------ #
    # Expansion
    # ------------------------------------------------------------------ #

    def lookup(self, word: str) -> Optional[str]:
        """Return the canonical phrase for a single lower-case word."""
        return self._dict.get(word)

    def expand(self, text: str) -> str:
        """Lower-case *text* and replace every known word by its phrase."""
        tokens = tokenize(text)
        out: List[str] = []
        for i, word in enumerate(tokens):
            phrase = self._dict.get(word)
            if phrase is None or self._inside_phrase(tokens, i, phrase):
                out.append(word)
            else:
                out.append(phrase)

        expanded = " ".join(out)
        if expanded != " ".join(tokens):
            logger.debug("expand: %r → %r", text, expanded)
        return expanded

    def _inside_phrase(self, tokens: List[str], index: int, phrase: str) -> bool:
        """True if ``tokens[index]`` belongs to an occurrence of *phrase*."""
        words = self._phrase_words[phrase]
        for offset, word in enumerate(words):
            if word != tokens[index]:
                continue
            start = index - offset
            if start >= 0 and tokens[start:start + len(words)] == words:
                return True
        return False

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def size(self) -> int:
        return len(self._dict)

    def all_synonyms(self) -> Dict[str, str]:
        """Return a *copy* of the internal dictionary."""
        return dict(self._dict)


def load_custom_synonyms(path: Path) -> Dict[str, str]:
    """Read a ``{word: phrase}`` JSON object from *path*.

    Raises
    ------
    ValueError
        If the file does not hold an object of string → string entries.
    """
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)

    if not isinstance(data, dict):
        raise ValueError(
            f"Custom synonym file {path} must contain a JSON object, "
            f"got {type(data).__name__}"
        )
    for word, phrase in data.items():
        if not isinstance(phrase, str):
            raise ValueError(
                f"Synonym {word!r} in {path} must map to a string, "
                f"got {type(phrase).__name__}"
            )

    logger.info("Loaded %d custom synonyms from %s", len(data), path)
    return dict(data)


_DEFAULT_EXPANDER = SynonymExpander()


def expand(text: str) -> str:
    """Expand *text* with the built-in synonym table."""
    return _DEFAULT_EXPANDER.expand(text)
