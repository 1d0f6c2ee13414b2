"""Domain layer — money, entities, pricing, promo, lifecycle and timeline rules.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
