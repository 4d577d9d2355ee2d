"""Health probing core: results, status tracking, alert strategies, TCP and TLS probes."""

__version__ = "0.1.0"