APP_NAME = "stationdb"
__version__ = "1.0.0"
