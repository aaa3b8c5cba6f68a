"""Utility modules shared across the package.

- `logger.py` defines the package logger
- `config.py` loads YAML configuration files
- `factory.py` instantiates classes from configuration blocks
"""
