"""Domain layer: graph models, locator rules, and override resolution.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
