"""Manages the operation of post-processors."""

from collections import OrderedDict, defaultdict
from copy import deepcopy

import numpy as np

from crtkit.utils.logger import logger

from .factories import post_processor_factory

__all__ = ["PostManager"]


class PostManager:
    """Manager in charge of handling post-processing scripts.

    It loads all the post-processor objects once and feeds them data.
    """

    def __init__(self, cfg, post_list=None):
        """Initialize the post-processing manager.

        Parameters
        ----------
        cfg : dict
            Post-processor configurations
        post_list : List[str], optional
            List of post-processors which have already been run
        """
        # Loop over the post-processor modules and get their priorities
        cfg = deepcopy(cfg)
        keys = list(cfg.keys())
        priorities = -np.ones(len(keys), dtype=np.int32)
        for i, key in enumerate(keys):
            if cfg[key] is not None and "priority" in cfg[key]:
                priorities[i] = cfg[key].pop("priority")

        # Add the modules to a processor list in decreasing order of priority
        self.modules = OrderedDict()
        for idx in np.argsort(-priorities, kind="stable"):
            key = keys[idx]
            self.modules[key] = post_processor_factory(key, cfg[key])
            logger.debug("Initialized post-processor `%s`.", key)

            # Check dependencies
            if post_list is not None:
                ups_post = tuple(self.modules)
                for post in self.modules[key]._upstream:
                    assert post in (tuple(post_list) + ups_post), (
                        f"Post-processor `{key}` is missing an essential "
                        f"upstream post-processor: `{post}`."
                    )

    def __call__(self, data):
        """Pass one entry or one batch of data through the post-processors.

        A batch is identified by a non-scalar `index` data product.

        Parameters
        ----------
        data : dict
            Dictionary of data products, updated in place
        """
        single_entry = np.isscalar(data.get("index", 0))
        for name, module in self.modules.items():
            # Run the post-processor on each entry
            if single_entry:
                result = module(data)

            else:
                num_entries = len(data["index"])
                result = defaultdict(list)
                for entry in range(num_entries):
                    result_e = module(data, entry)
                    if result_e is not None:
                        for k, v in result_e.items():
                            result[k].append(v)

            # Update the input dictionary
            if result is not None:
                for key, val in result.items():
                    if not single_entry:
                        assert len(val) == num_entries, (
                            f"The number {key} ({len(val)}) does not match "
                            f"the number of entries ({num_entries})."
                        )
                    data[key] = val
