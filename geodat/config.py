# geodat/config.py

DEFAULT_INPUT = "qqwry.ipdb"
DEFAULT_OUTPUT = "geoip.dat"
DEFAULT_IP_VERSION = "4"

# Stand-in range attached to every code when no CIDR map is supplied.
PLACEHOLDER_CIDR = ("192.168.1.0", 24)
