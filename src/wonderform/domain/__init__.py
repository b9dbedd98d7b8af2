"""Domain layer — value types, rules, and form schemas.

This layer depends only on stdlib and pydantic.
It must never import from engine, services, commands, or config.
"""
