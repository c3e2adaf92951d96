"""Extract, flatten and build UDIF (.dmg) disk images."""

__version__ = "0.1.0"