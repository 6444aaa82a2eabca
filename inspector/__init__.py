"""Entity inspector: concurrent filesystem inspection and source grading."""

__version__ = "1.0.0"
