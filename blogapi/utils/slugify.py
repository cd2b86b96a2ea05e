"""
URL slug generation for post titles.
"""
import re

MAX_SLUG_LENGTH = 100

# Cyrillic to Latin, lowercase only: input is lowercased before lookup
TRANSLIT = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "yo",
    "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "h", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "sch",
    "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
}

_NON_SLUG = re.compile(r"[^a-z0-9\-]+")
_HYPHENS = re.compile(r"-+")


def generate(text: str) -> str:
    """
    Build a slug from arbitrary text.

    Only plain spaces become hyphens; tabs, newlines and other
    whitespace are dropped with the rest of the punctuation.

    >>> generate("Привет Мир")
    'privet-mir'
    >>> generate("Go 1.25 & Rust!")
    'go-125-rust'
    """
    slug = "".join(TRANSLIT.get(ch, ch) for ch in text.lower())
    slug = slug.replace(" ", "-")
    slug = _NON_SLUG.sub("", slug)
    slug = _HYPHENS.sub("-", slug).strip("-")

    if len(slug) > MAX_SLUG_LENGTH:
        slug = slug[:MAX_SLUG_LENGTH].rstrip("-")

    return slug
