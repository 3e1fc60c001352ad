"""Domain layer — path codec, value syntax, tokens and transforms.

This layer depends only on the standard library.
It must never import from engine, services, infrastructure, or config.
"""
