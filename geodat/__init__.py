"""Build geoip.dat lookup tables from Chinese IP-geolocation records."""

__version__ = "0.1.0"
