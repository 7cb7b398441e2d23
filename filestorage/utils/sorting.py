"""Natural ordering of paths: "file2" sorts before "file10", case and accents ignored."""
import re
import unicodedata

_DIGITS = re.compile(r"(\d+)")


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char)).casefold()


def natural_sort_key(path: str) -> tuple:
    """
    Build a sort key comparing digit runs by value and text case-insensitively.

    The original path is the final tie-breaker so the order is deterministic.
    """
    parts = []
    for index, token in enumerate(_DIGITS.split(path)):
        if index % 2:
            parts.append((0, int(token), ""))
        elif token:
            parts.append((1, 0, _fold(token)))
    return tuple(parts), path
