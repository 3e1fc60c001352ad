"""tinct — compiler for declarative colour-theme documents."""

__version__ = "0.1.0"
