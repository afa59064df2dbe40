"""
Endpoint modules, one ``APIRouter`` per domain.

Handlers stay thin: they pick the auth dependency, validate the body
with a schema and call a service.  Failures propagate as domain errors
and are rendered by the handlers in ``main.py``.
"""
