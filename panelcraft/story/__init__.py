"""
Panelcraft Story Module

Page generation across new stories, added pages and redraws.
"""
