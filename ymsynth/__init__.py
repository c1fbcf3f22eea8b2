"""Register-level YM2612 FM synthesizer model, formatting helpers and a text parameter panel."""

__version__ = "0.1.0"
__all__ = ["synth", "vstring", "ui_fm"]