from .quantize import js_round, quantize

__all__ = ["js_round", "quantize"]
