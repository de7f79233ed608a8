"""OFX/QFX normalizer and transaction remapper"""

__version__ = "0.1.0"
