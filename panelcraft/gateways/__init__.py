"""
Panelcraft Gateways Module

Adapters for the image model, text model, object storage, persistence and OCR.
"""

from .base import ImageGateway, TextGateway, StorageGateway, StoryRepository, OCRGateway
