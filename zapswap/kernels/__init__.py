"""
Kernel layer.

Deterministic integer kernels used by the zap core. Everything here is pure:
no I/O, no logging, no floating point.
"""
