"""
Service layer.

Each service is a class of async classmethods that owns the SQL for
one domain and raises ``core.errors`` exceptions on failure.  Route
handlers call services; services never import from the API layer.
"""
