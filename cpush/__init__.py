"""cpush - publish code-push patches for Flutter apps."""

__version__ = "0.1.0"
