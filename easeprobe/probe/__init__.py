"""Probe status, results, notification strategies, request tracing and TCP/TLS probes."""