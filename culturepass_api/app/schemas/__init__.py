"""
Pydantic schema definitions for API payloads.

Each domain defines its own request and response models.  Schemas are
separated from the SQL in ``services`` so the JSON representation
(camelCase on the wire) is decoupled from the snake_case columns.
"""
