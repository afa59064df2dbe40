"""
HTTP layer of the CulturePass API.

``router.py`` exposes a single ``router`` that bundles every domain
router from ``endpoints``; ``main.py`` mounts it under ``/api``.
"""
