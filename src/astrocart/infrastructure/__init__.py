"""Infrastructure layer — order persistence and the Shop context.

This layer depends on stdlib, pydantic and the domain models it persists.
It must never import from services, commands, or output.
"""
