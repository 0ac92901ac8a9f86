__version__ = "2610.191200"
