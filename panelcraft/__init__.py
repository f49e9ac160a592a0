"""
Panelcraft - AI Comic Page Generation Backend

Turns a natural-language page description into a multi-panel comic page and
chains pages into stories, keeping characters and style consistent across
pages through reference images and accumulated prompt context.

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Panelcraft Team"
__project__ = "Panelcraft"

from pathlib import Path

# Load environment variables early - before any other imports that might need them
from panelcraft.core.env_loader import ensure_env_loaded
ensure_env_loaded()

# Package root directory
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent

__all__ = [
    "__version__",
    "__author__",
    "__project__",
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
]
