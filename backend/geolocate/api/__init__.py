"""
HTTP API for the Geolocate service
"""
