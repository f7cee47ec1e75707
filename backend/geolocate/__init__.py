"""
Geolocate API - infers where a photo was taken using a multimodal model
"""

__version__ = "1.0.0"
