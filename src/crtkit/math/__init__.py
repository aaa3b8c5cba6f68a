"""Numba JIT compiled mathematical routines."""

from .geometry import *
