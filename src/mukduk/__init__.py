"""mukduk — open, switch and kill terminal multiplexer sessions per project."""

__version__ = "0.3.0"
