"""
Reading time estimates for post bodies.
"""
import math
import re

WORDS_PER_MINUTE = 200

_WORD = re.compile(r"[^\W_]+")
_IMAGE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")


def count_words(text: str) -> int:
    """A word is a run of letters or digits."""
    return len(_WORD.findall(text))


def calculate(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Minutes needed to read ``text``: 0 for empty text, otherwise at least 1."""
    if not text:
        return 0
    if words_per_minute <= 0:
        words_per_minute = WORDS_PER_MINUTE

    minutes = math.ceil(count_words(text) / words_per_minute)
    return max(minutes, 1)


def _strip_code_blocks(text: str) -> str:
    lines = []
    in_block = False
    for line in text.split("\n"):
        if line.strip().startswith("```"):
            in_block = not in_block
            continue
        if not in_block:
            lines.append(line)
    return "\n".join(lines)


def estimate_markdown(markdown: str) -> int:
    """Reading time of markdown with code fences, images and markup removed."""
    text = _strip_code_blocks(markdown)
    text = text.replace("`", "")
    text = _IMAGE.sub("", text)
    text = _LINK.sub(r"\1", text)
    text = text.replace("#", "").replace("*", "")
    return calculate(text)
