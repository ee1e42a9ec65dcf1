"""Browse an FTP server over HTTP."""

__version__ = "0.1.0"
