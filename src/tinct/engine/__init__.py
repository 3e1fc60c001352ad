"""Engine layer — import composition, scope resolution, and output assembly.

Colour arithmetic goes through the ``ColourMath`` protocol; the compiler
defaults to :class:`~tinct.infrastructure.colour.ColorsysColourMath`.
File I/O stays in :mod:`tinct.infrastructure`.
"""
