# flyby: transponder database tools for a satellite tracker

__version__ = "0.3.0"
