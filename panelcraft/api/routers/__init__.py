"""
API Routers
"""

from . import comics, stories, pages, ocr, export

__all__ = ["comics", "stories", "pages", "ocr", "export"]
