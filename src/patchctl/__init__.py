"""patchctl: emit Cargo ``[patch]`` overrides from a local workspace."""

__version__ = "0.1.0"
