"""Script-aware tokenize/normalize pipeline."""

from __future__ import annotations

import re
import unicodedata
from typing import Callable

import Stemmer

from ._stop_words import STOP_WORDS


def _char_class(keep: Callable[[str], bool], blocks: tuple[tuple[int, int], ...]) -> str:
    """Regex class body covering the code points in ``blocks`` that ``keep`` accepts."""
    parts: list[str] = []
    for lo, hi in blocks:
        start = None
        for cp in range(lo, hi + 2):
            inside = cp <= hi and keep(chr(cp))
            if inside and start is None:
                start = cp
            elif not inside and start is not None:
                end = cp - 1
                parts.append(
                    f"\\u{start:04x}" if start == end
                    else f"\\u{start:04x}-\\u{end:04x}"
                )
                start = None
    return "".join(parts)


def _is_mark(ch: str) -> bool:
    return unicodedata.category(ch)[0] == "M"


def _is_letter_mark_or_digit(ch: str) -> bool:
    return unicodedata.category(ch)[0] in "LMN"


# Combining marks (vowel signs, viramas, accents) belong to the word they
# attach to. Basic Multilingual Plane only.
_MARKS = _char_class(_is_mark, ((0x0300, 0xFFFF),))

# Scripts written without spaces between words are cut into bigrams:
# Hiragana, Katakana, CJK ideographs (incl. extension A and compatibility),
# Hangul, then Thai, Lao, Myanmar and Khmer letters with their marks.
_UNSEGMENTED = (
    "\u3040-\u30fa\u30fc-\u30ff"  # minus the katakana middle dot
    "\u3400-\u4dbf"
    "\u4e00-\u9fff"
    "\uf900-\ufaff"
    "\u1100-\u11ff"
    "\u3130-\u318f"
    "\uac00-\ud7af"
) + _char_class(
    _is_letter_mark_or_digit,
    ((0x0E00, 0x0E7F), (0x0E80, 0x0EFF), (0x1000, 0x109F), (0x1780, 0x17FF)),
)

_TOKEN_RE = re.compile(
    rf"(?P<bigram>[{_UNSEGMENTED}]+)"
    rf"|(?P<word>(?:(?![{_UNSEGMENTED}])(?:[^\W_]|[{_MARKS}]))+)"
)


def _bigrams(run: str) -> list[str]:
    """Overlapping character bigrams; a lone character stands for itself."""
    if len(run) == 1:
        return [run]
    return [run[i:i + 2] for i in range(len(run) - 1)]


class Tokenizer:
    """Turns raw text into an ordered list of normalized terms.

    Text is NFKC-normalized and case-folded. Runs of scripts written
    without spaces (CJK, Hangul, Thai, Lao, Myanmar, Khmer) become
    overlapping bigrams. Everything else is split on non-word characters
    with combining marks kept in their word, stop words are dropped and
    the rest is Snowball-stemmed.
    """

    __slots__ = ("_stemmer", "_drop_stop_words", "_language")

    def __init__(
        self,
        stemmer_language: str | None = "english",
        drop_stop_words: bool = True,
    ) -> None:
        self._language = stemmer_language
        self._stemmer = (
            Stemmer.Stemmer(stemmer_language) if stemmer_language else None
        )
        self._drop_stop_words = drop_stop_words

    @property
    def language(self) -> str | None:
        return self._language

    def tokenize(self, text: str) -> list[str]:
        if not text or text.isspace():
            return []

        normalized = unicodedata.normalize("NFKC", text).casefold()
        terms: list[str] = []
        words: list[str] = []

        def flush() -> None:
            if words:
                terms.extend(self._stem(words))
                words.clear()

        for m in _TOKEN_RE.finditer(normalized):
            run = m.group("bigram")
            if run is not None:
                flush()
                terms.extend(_bigrams(run))
                continue
            word = m.group("word")
            if self._drop_stop_words and word in STOP_WORDS:
                continue
            words.append(word)
        flush()

        return terms

    def _stem(self, words: list[str]) -> list[str]:
        if self._stemmer is None:
            return list(words)
        return self._stemmer.stemWords(words)
