"""Definitions file parsing and cross-reference resolution.

Definitions files hold one ``WORD definition text`` entry per line; blank
lines and lines starting with ``#`` are skipped. Definition text separates
senses with `` / `` and tags the part of speech of a sense with ``[pos ...]``.

Senses may point at another word's definition:

- ``{WORD=pos}`` (follow): rendered as ``WORD (sub-definition)``
- ``<WORD=pos>`` (replace): rendered as ``WORD, sub-definition``

Once a follow token appears in a resolution chain, follow rendering applies
to every later token of that chain. Follow expansions consume recursion
depth; replace expansions do not, so replace chains are bounded by refusing
to expand the same target twice instead.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Mapping

from ..core.models import DefinitionEntry, SENSE_SEPARATOR

logger = logging.getLogger(__name__)

FOLLOW_RE = re.compile(r"\{(\w+)=(\w+)\}")
REPLACE_RE = re.compile(r"<(\w+)=(\w+)>")
POS_RE = re.compile(r"\[(\w+)")
TAG_RE = re.compile(r"\[[^\]]*\]?")

DEFAULT_MAX_DEPTH = 3


def simplify(text: str) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    return " ".join(text.split())


# =============================================================================
# Parsing
# =============================================================================


def parse_definition_line(line: str) -> DefinitionEntry | None:
    """Parse one line. Returns None for blank and comment lines."""
    line = simplify(line)
    if not line or line.startswith("#"):
        return None
    word, _, definition = line.partition(" ")
    return DefinitionEntry(word=word, raw_definition=definition)


def iter_definition_file(path: Path | str) -> Iterator[DefinitionEntry | None]:
    """Yield one item per line of ``path``, None for skipped lines."""
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            yield parse_definition_line(line)


def load_definitions(path: Path | str) -> dict[str, str]:
    """Read a definitions file into a word -> raw definition mapping.

    Later lines for the same word replace earlier ones. Lines holding only
    a word are skipped.
    """
    definitions: dict[str, str] = {}
    for entry in iter_definition_file(path):
        if entry is not None and entry.raw_definition:
            definitions[entry.word] = entry.raw_definition
    return definitions


# =============================================================================
# Filtering
# =============================================================================


def has_senses(definition: str | None) -> bool:
    """True if some sense carries text beyond its part-of-speech tag."""
    if not definition:
        return False
    return any(
        simplify(TAG_RE.sub(" ", sense)) for sense in definition.split(SENSE_SEPARATOR)
    )


def filter_definitions(definitions: Mapping[str, str | None]) -> dict[str, str]:
    """Drop definitions that are only bare part-of-speech tags."""
    return {word: text for word, text in definitions.items() if has_senses(text)}


# =============================================================================
# Resolution
# =============================================================================


class DefinitionResolver:
    """Expands cross-reference tokens against a word -> raw definition map."""

    def __init__(self, definitions: Mapping[str, str], max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.definitions = definitions
        self.max_depth = max_depth

    def sub_definition(self, word: str, pos: str) -> str:
        """First sense of ``word`` tagged ``pos``, with the tag removed.

        Returns an empty string when the word or part of speech is absent.
        """
        definition = self.definitions.get(word)
        if not definition:
            return ""

        for sense in definition.split(SENSE_SEPARATOR):
            match = POS_RE.search(sense)
            if not match or match.group(1) != pos:
                continue
            tag_end = sense.find("]", match.end())
            tag_end = len(sense) if tag_end < 0 else tag_end + 1
            text = simplify(sense[: match.start()] + " " + sense[tag_end:])
            if text:
                return text
        return ""

    def replace_links(
        self,
        text: str,
        depth: int,
        use_follow: bool = False,
        _expanded: frozenset[tuple[str, str]] = frozenset(),
    ) -> str:
        """Rewrite the first cross-reference token in ``text``, then recurse.

        Args:
            text: A single sense of definition text
            depth: Remaining follow expansions
            use_follow: Whether follow rendering is already in effect

        Returns:
            Text with every token replaced by an expansion or a fallback
        """
        match = FOLLOW_RE.search(text)
        is_follow_token = match is not None
        if is_follow_token:
            use_follow = True
        else:
            match = REPLACE_RE.search(text)

        if match is None:
            return text

        word, pos = match.group(1), match.group(2)
        upper = word.upper()
        fallback = word if use_follow else upper
        target = (upper, pos)

        # Replace rendering expands each target once per sense; a repeated
        # token, cyclic or not, falls back to the bare word.
        if depth == 0 or (not use_follow and target in _expanded):
            replacement = fallback
        else:
            subdef = self.sub_definition(upper, pos)
            if not subdef:
                logger.debug("No %s sense for link target %s", pos, upper)
                replacement = fallback
            elif use_follow:
                replacement = f"{word} ({subdef})" if is_follow_token else subdef
            else:
                replacement = f"{upper}, {subdef}"

        modified = text[: match.start()] + replacement + text[match.end() :]
        next_depth = depth - 1 if use_follow and depth > 0 else depth
        return self.replace_links(
            modified, next_depth, use_follow, _expanded | {target}
        )

    def resolve(self, definition: str) -> str:
        """Resolve each sense independently, one output line per sense."""
        return "\n".join(
            self.replace_links(sense, self.max_depth)
            for sense in definition.split(SENSE_SEPARATOR)
        )


def resolve_definitions(
    raw_definitions: Mapping[str, str | None],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, str]:
    """Filter ``raw_definitions`` and resolve every remaining entry."""
    definitions = filter_definitions(raw_definitions)
    resolver = DefinitionResolver(definitions, max_depth)
    return {word: resolver.resolve(text) for word, text in definitions.items()}
