__version__ = "0.3.0"

MATCH_VERSION = "v3"
