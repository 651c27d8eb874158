"""adslot: neighborhood ad inventory, booking and feed placement."""

__version__ = "0.1.0"
