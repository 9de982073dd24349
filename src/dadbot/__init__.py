"""dadbot: Discord dad-joke responder."""

__version__ = "1.0.0"
