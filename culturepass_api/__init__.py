"""
Top‑level package for the CulturePass API.

This file makes ``culturepass_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``culturepass_api.app.main``.  The package provides no public exports;
all functionality lives in submodules under ``app``.
"""

__all__ = []
