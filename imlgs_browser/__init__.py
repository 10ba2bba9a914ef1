"""
Top-level package for the IMLGS sample browser.

This package exposes the core architecture (query compiler, dataset view, UI adapters).
Most code should import from submodules such as:
    imlgs_browser.core
    imlgs_browser.config
    imlgs_browser.ui
"""

__all__: list[str] = []
