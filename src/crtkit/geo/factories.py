"""Construct geometry and space-charge services from their names."""

from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from crtkit.utils.factory import instantiate, module_dict

from . import sce
from .geometry import Geometry

# Get config directory relative to this module
GEO_CONFIG_DIR = Path(__file__).parent / "config"

__all__ = ["geo_factory", "sce_factory"]


def geo_dict() -> Dict[Path, Dict[str, str]]:
    """Builds a dictionary of available geometry configurations.

    Returns
    -------
    dict
        Dictionary which maps configuration paths onto their name, tag and version
    """
    options = {}
    for path in GEO_CONFIG_DIR.glob("*/*_geometry.yaml"):
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)

        options[path] = {k: cfg[k] for k in ("name", "tag", "version")}
        options[path]["version"] = str(float(options[path]["version"]))

    return options


def geo_factory(
    detector: str,
    tag: Optional[str] = None,
    version: Optional[Union[str, int, float]] = None,
    crt: Optional[dict] = None,
) -> Geometry:
    """Instantiates a geometry from a packaged detector configuration.

    Parameters
    ----------
    detector : str
        Name of the detector (e.g. "icarus")
    tag : str, optional
        Geometry tag. If specified, must match exactly.
    version : Union[str, int, float], optional
        Geometry version. If only the major revision is specified, only the
        major revision must match.
    crt : dict, optional
        CRT module configuration, which overrides the packaged one

    Returns
    -------
    Geometry
         Initialized geometry object
    """
    # Find the geometry configurations that match the detector name
    paths, tags, versions = [], [], []
    for path, cfg in geo_dict().items():
        if cfg["name"].lower() == detector.lower():
            paths.append(path)
            tags.append(cfg["tag"])
            versions.append(cfg["version"])

    if not len(paths):
        raise ValueError(f"No geometry found for detector '{detector}'.")

    # If a tag is specified, must find the exact tag
    if tag is not None:
        if tag not in tags:
            raise ValueError(
                f"No geometry found for detector '{detector}' with tag '{tag}'. "
                f"Available tags are: {set(tags)}"
            )
        file_path = paths[tags.index(tag)]

    # If a version is specified, match the major (and minor) revisions
    elif version is not None:
        version_parts = str(version).split(".")
        file_path = None
        for path, ver in zip(paths, versions):
            if ver.split(".")[: len(version_parts)] == version_parts:
                file_path = path
                break

        if file_path is None:
            raise ValueError(
                f"No geometry found for detector '{detector}' with version "
                f"'{version}'. Available versions are: {set(versions)}"
            )

    # Otherwise, use the most recent version
    else:
        file_path = paths[versions.index(max(versions, key=float))]

    # Parse configuration file as a dictionary
    with open(file_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if crt is not None:
        cfg["crt"] = crt

    return Geometry(**cfg)


def sce_factory(cfg: Optional[Union[str, dict]] = None) -> sce.SpaceChargeBase:
    """Instantiates a space-charge service from its configuration.

    Parameters
    ----------
    cfg : Union[str, dict], optional
        Service configuration. If not specified, the disabled service is used.

    Returns
    -------
    SpaceChargeBase
        Space-charge service
    """
    if cfg is None:
        return sce.NoSpaceCharge()

    return instantiate(module_dict(sce), cfg)
