"""Football match frame analysis service."""
