"""Pull Counter - counts boss encounter attempts from the combat network log."""

__version__ = "1.0.0"
