"""tortui - terminal torrent client."""

__version__ = "0.1.0"
