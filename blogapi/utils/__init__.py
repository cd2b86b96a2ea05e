from .slugify import generate as slugify
from .readtime import estimate_markdown

__all__ = ["slugify", "estimate_markdown"]
