"""
Panelcraft Services Module

Story management, OCR and PDF export.
"""

from .stories import StoryService, StorySummary
from .ocr import OCRService, OCRResult
from .export import export_story_pdf, render_pdf, safe_filename
