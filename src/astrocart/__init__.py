"""astrocart — cart pricing and order lifecycle core for the astrology shop."""

__version__ = "0.1.0"
