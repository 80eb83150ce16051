import re

# Administrative and location noise found in statement details
BLACKLIST = frozenset({
    "uae",
    "abu",
    "dhabi",
    "llc",
    "are",
})

_NON_LETTERS = re.compile(r"[^a-z\s]")
_DELIMITERS = re.compile(r"[-/,\s]+")


def tokenize(text: str | None) -> list[str]:
    if not text:
        return []
    cleaned = _NON_LETTERS.sub("", text.lower())
    return [
        token
        for token in _DELIMITERS.split(cleaned)
        if len(token) > 1 and token not in BLACKLIST
    ]


def sanitize(text: str | None) -> str:
    """
    Normalize transaction details into a space separated string of tokens.

    Everything is lowercased, anything that isn't a letter or whitespace is
    dropped, and single letters and blacklisted words are removed. An input made
    only of noise gives an empty string.
    """
    return " ".join(tokenize(text))
