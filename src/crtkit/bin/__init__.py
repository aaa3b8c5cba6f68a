"""Command line interface of the CRT reconstruction package.

- `cli.py` loads a configuration file, applies command-line overrides and
  builds the reconstruction chain it describes
"""
