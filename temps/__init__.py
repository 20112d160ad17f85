"""temps - a simple time tracker keeping its data in a tab-separated log"""

__version__ = "0.3.0"
