"""
Panelcraft Core Module

Contains core systems including configuration, constants, exceptions, models and logging.
"""

from .config import Settings, get_settings, settings
from .constants import ErrorType
from .exceptions import *
from .logging_config import setup_logging, get_logger
from .models import Story, Page, StoryWithPages, TextBlock, Vertex
