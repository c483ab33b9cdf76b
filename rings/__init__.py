"""Application framework toolkit: configuration, errors, lifecycle, services, balancing and helpers."""

__version__ = "0.1.0"