"""Folder Size Agent: measures a Synology shared folder and serves the result over HTTP."""

__version__ = "0.1.0"
