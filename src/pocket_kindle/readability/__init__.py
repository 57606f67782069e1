"""Readable-content conversion for saved articles."""

from .converter import ReadabilityConverter
from .extract import extract_article
from .worker import LocalReadabilityWorker

__all__ = [
    "ReadabilityConverter",
    "LocalReadabilityWorker",
    "extract_article",
]
