"""
Panelcraft API Module

FastAPI application, routers and request wiring.
"""
