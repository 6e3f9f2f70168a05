"""Mount NFS shares from a YAML configuration file."""

__version__ = "1.1.0"
