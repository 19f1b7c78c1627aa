"""factfinder: conversational information-collection and completion engine.

Drives multi-turn conversational forms on top of a language model, keeping
collected facts, completion scoring and readiness deterministic even when
the model's JSON is not.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
