"""OptiHub - asset optimization analysis engine."""

__version__ = "0.1.0"
