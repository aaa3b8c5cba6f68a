"""CRT reconstruction driver.

Takes care of building the CRT reconstruction chain in one place:
- Configuration processing (verbosity, random seed)
- Post-processor chain (CRT simulation, CRT/TPC matching)
"""

import time
from copy import deepcopy

import yaml

from .post import PostManager
from .post.factories import POST_DICT
from .utils.config import load_config
from .utils.logger import logger
from .version import __version__

__all__ = ["Driver"]


class Driver:
    """Central CRT reconstruction driver.

    It takes a configuration dictionary of the form:

    .. code-block:: yaml

        base:
          verbosity: info
          seed: 12
        post:
          crt_sim:
            detector: icarus
          crt_t0_match:
            detector: icarus

    The driver is then called on a dictionary of data products (one entry,
    or a batch of entries identified by a list-like `index` product).
    """

    def __init__(self, cfg):
        """Initializes the class attributes.

        Parameters
        ----------
        cfg : dict
            Global configuration dictionary
        """
        base, post = self.process_config(**deepcopy(cfg))
        self.seed = base["seed"]
        self.post = PostManager(post)

    @classmethod
    def from_file(cls, cfg_path):
        """Builds a driver from a configuration file.

        Parameters
        ----------
        cfg_path : str
            Path to the YAML configuration file

        Returns
        -------
        Driver
            Configured driver
        """
        return cls(load_config(cfg_path))

    def process_config(self, post, base=None):
        """Reads the configuration and dumps it to the logger.

        Parameters
        ----------
        post : dict
            Post-processor configuration dictionary
        base : dict, optional
            Base driver configuration dictionary

        Returns
        -------
        dict
            Processed base configuration
        dict
            Processed post-processor configuration
        """
        # If there is no base configuration, make it empty (will use defaults)
        if base is None:
            base = {}

        # Set the verbosity of the logger
        verbosity = base.get("verbosity", "info")
        logger.setLevel(verbosity.upper())

        # If the seed is not set, randomize it
        if base.get("seed", -1) < 0:
            base["seed"] = int(time.time())
        else:
            assert isinstance(
                base["seed"], int
            ), f"The driver seed must be an integer, got: {base['seed']}"

        # Seed the simulators which do not have their own seed
        assert post, "The configuration must contain a non-empty `post` block."
        for key, block in post.items():
            if key not in POST_DICT or POST_DICT[key].name != "crt_sim":
                continue

            block = post[key] = dict(block or {})
            response = block["response"] = dict(block.get("response") or {})
            response.setdefault("seed", base["seed"])

        # Log the configuration
        self.cfg = {"base": base, "post": post}
        logger.info("Release version: %s\n", __version__)
        logger.info(yaml.dump(self.cfg, default_flow_style=None, sort_keys=False))

        return base, post

    def __call__(self, data):
        """Runs the reconstruction chain on one entry or a batch of entries.

        Parameters
        ----------
        data : dict
            Dictionary of data products, updated in place

        Returns
        -------
        dict
            Updated dictionary of data products
        """
        self.post(data)

        return data
