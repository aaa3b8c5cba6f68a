"""Contains functions needed to instantiate a class from a dictionary.

This allows to generically convert a YAML block into an instantiated class
with all the appropriate checks that the class exists and is provided
with appropriate arguments.
"""

from copy import deepcopy
from warnings import warn

from .logger import logger

__all__ = ["module_dict", "instantiate"]


def module_dict(module):
    """Converts module into a dictionary which maps class names onto classes.

    A class is registered under its class name, under its `name` attribute
    (if it has one) and under each of its `aliases`.

    Parameters
    ----------
    module : module
        Module from which to fetch the classes

    Returns
    -------
    dict
        Dictionary which maps acceptable class names to classes themselves
    """
    classes = {}
    for cls_name in getattr(module, "__all__", dir(module)):
        # Skip private objects
        if cls_name.startswith("_"):
            continue

        # Only consider classes which belong to the module of interest
        cls = getattr(module, cls_name)
        if not isinstance(cls, type) or module.__name__ not in cls.__module__:
            continue

        classes[cls_name] = cls
        if getattr(cls, "name", None):
            classes[cls.name] = cls
        for alias in getattr(cls, "aliases", ()):
            classes[alias] = cls

    return classes


def instantiate(classes, cfg, **kwargs):
    """Instantiates a class based on a configuration dictionary and a list of
    possible classes to chose from.

    This function supports two YAML configuration structures
    (parsed as a dictionary):

    .. code-block:: yaml

        block:
          name: class_name
          kwarg_1: value_1
          kwarg_2: value_2

    or

    .. code-block:: yaml

        block:
          name: class_name
          kwargs:
            kwarg_1: value_1
            kwarg_2: value_2

    Parameters
    ----------
    classes : dict
        Dictionary which maps a class name onto an object class.
    cfg : Union[str, dict]
        Configuration dictionary, or simply the name of the class
    **kwargs : dict, optional
        Additional parameters to pass to the class constructor

    Returns
    -------
    object
        Instantiated object
    """
    # A bare string is a class name with no parameters
    if isinstance(cfg, str):
        cfg = {"name": cfg}

    config = deepcopy(cfg)
    assert "name" in config, "Could not find the name of the class under `name`"
    class_name = config.pop("name")

    # Check that the class we are looking for exists
    if class_name not in classes:
        raise ValueError(
            f"Could not find '{class_name}' in the dictionary which maps "
            f"names to classes. Available names: {list(classes.keys())}"
        )

    cls = classes[class_name]
    if class_name in getattr(cls, "aliases", ()):
        warn(
            f"This name ({class_name}) is deprecated. Use {cls.name} instead.",
            DeprecationWarning,
        )

    # Gather keyword arguments from the `kwargs` block and the top level
    params = dict(config.pop("kwargs", {}), **kwargs)
    for key in config.keys():
        assert key not in params, (
            f"The keyword argument {key} is provided "
            "at the top level and under `kwargs`. Ambiguous."
        )
    params.update(config)

    try:
        return cls(**params)

    except Exception as err:
        logger.error(
            "Failed to instantiate %s with these arguments:\n  - kwargs: %s",
            cls.__name__,
            params,
        )
        raise err
