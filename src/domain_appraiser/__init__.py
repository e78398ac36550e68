"""Domain Appraiser - Estimate what a domain name is worth."""

__version__ = "0.1.0"
