"""Module in charge of loading CRT reconstruction configuration files.

The configuration language is plain YAML with three additions:
- `include: base.yaml` (or a list of files) at the top level of a file merges
  the included configuration(s) underneath the current one;
- `key: !include block.yaml` replaces a single block by the content of a file;
- dot-notation keys (`post.crt_match.distance_limit: 50`) override a single
  nested parameter after all includes have been merged.
"""

import os
import re
from copy import deepcopy

import yaml

__all__ = [
    "ConfigError",
    "ConfigIncludeError",
    "ConfigPathError",
    "load_config",
    "load_config_string",
    "parse_value",
    "set_nested_value",
]


class ConfigError(Exception):
    """Base exception for all configuration errors."""


class ConfigIncludeError(ConfigError):
    """Raised when an included file cannot be found, loaded or is cyclic."""


class ConfigPathError(ConfigError):
    """Raised when a dot-notation override cannot be applied."""


class ConfigLoader(yaml.SafeLoader):
    """Configuration loader class.

    Supports the `!include` tag, which loads a YAML file relative to the
    directory of the configuration file being parsed.
    """

    def __init__(self, stream, root=None, stack=()):
        """Initialize the loader.

        Parameters
        ----------
        stream : Union[_io.TextIOWrapper, str]
            Output of python's `open` function on a yaml file, or a string
        root : str, optional
            Directory used to resolve relative `!include` paths
        stack : List[str], optional
            Files currently being loaded (cycle detection)
        """
        # Fetch the parent directory where the configuration file lives
        if root is None:
            root = os.path.split(getattr(stream, "name", ""))[0] or os.getcwd()
        self._root = root
        self._stack = list(stack)

        # Initialize the base loader
        super().__init__(stream)

    def include(self, node):
        """Load and include a YAML file that is requested in the base config.

        Parameters
        ----------
        node : yaml.Node
            Scalar node holding the name of the file to include
        """
        filename = os.path.abspath(
            os.path.join(self._root, self.construct_scalar(node))
        )
        if not os.path.isfile(filename):
            raise ConfigIncludeError(f"Included file not found: {filename}")

        return _load_file(filename, self._stack)


# Add the include constructor
ConfigLoader.add_constructor("!include", ConfigLoader.include)


def _deep_merge(base_dict, override_dict):
    """Recursively merge override_dict into base_dict.

    Parameters
    ----------
    base_dict : dict
        Base dictionary to merge into
    override_dict : dict
        Dictionary with values to override

    Returns
    -------
    dict
        Merged dictionary
    """
    result = deepcopy(base_dict)
    for key, value in override_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def set_nested_value(config, key_path, value):
    """Set a nested value in a dictionary using dot notation.

    Parameters
    ----------
    config : dict
        Configuration dictionary to modify
    key_path : str
        Dot-separated path to the key (e.g. "post.crt_match.distance_limit")
    value : object
        Value to set

    Returns
    -------
    dict
        Modified configuration dictionary
    """
    keys = key_path.split(".")
    current = config
    for key in keys[:-1]:
        if key not in current:
            current[key] = {}
        elif not isinstance(current[key], dict):
            raise ConfigPathError(
                f"Cannot set '{key_path}': '{key}' is not a dictionary"
            )
        current = current[key]

    current[keys[-1]] = value

    return config


def _extract_includes_and_overrides(config_dict):
    """Extract include directives and dot-notation overrides from a config.

    Parameters
    ----------
    config_dict : dict
        Loaded YAML configuration dictionary

    Returns
    -------
    List[str]
        List of included files
    dict
        Dictionary of dot-notation overrides
    dict
        Configuration stripped of the include/override directives
    """
    if not isinstance(config_dict, dict):
        return [], {}, config_dict

    includes, overrides, cleaned = [], {}, {}
    dotted_key_pattern = re.compile(
        r"^[a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z_][a-zA-Z0-9_]*)+$"
    )
    for key, value in config_dict.items():
        if key == "include":
            if isinstance(value, str):
                includes.append(value)
            elif isinstance(value, list):
                includes.extend(value)
            else:
                raise ConfigIncludeError(
                    f"'include' must be a string or list of strings, got {type(value)}"
                )
        elif isinstance(key, str) and dotted_key_pattern.match(key):
            overrides[key] = value
        else:
            cleaned[key] = value

    return includes, overrides, cleaned


def parse_value(value):
    """Parse a string value into the appropriate Python type.

    Parameters
    ----------
    value : object
        Value to parse, only strings are modified

    Returns
    -------
    object
        Parsed value
    """
    if not isinstance(value, str):
        return value

    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


def _resolve(main_config, root_dir, stack):
    """Applies includes and overrides to a freshly loaded configuration.

    Parameters
    ----------
    main_config : dict
        Configuration as loaded from YAML
    root_dir : str
        Directory used to resolve relative include paths
    stack : List[str]
        Files currently being loaded (cycle detection)

    Returns
    -------
    dict
        Resolved configuration dictionary
    """
    if main_config is None:
        return {}

    includes, overrides, cleaned = _extract_includes_and_overrides(main_config)

    # Load all included files first, in order
    config = {}
    for include_file in includes:
        include_path = os.path.abspath(os.path.join(root_dir, include_file))
        if not os.path.isfile(include_path):
            raise ConfigIncludeError(f"Included file not found: {include_path}")

        config = _deep_merge(config, _load_file(include_path, stack))

    # Merge the main configuration on top of the included ones
    if cleaned:
        config = _deep_merge(config, cleaned)

    # Apply overrides using dot notation
    for key_path, value in overrides.items():
        config = set_nested_value(config, key_path, parse_value(value))

    return config


def _load_file(cfg_path, stack):
    """Load a single configuration file, recursively resolving includes.

    Parameters
    ----------
    cfg_path : str
        Absolute path to the configuration file
    stack : List[str]
        Files currently being loaded (cycle detection)

    Returns
    -------
    dict
        Resolved configuration dictionary
    """
    if cfg_path in stack:
        cycle = " -> ".join([*stack, cfg_path])
        raise ConfigIncludeError(f"Circular include detected: {cycle}")

    root_dir = os.path.dirname(cfg_path)
    stack = [*stack, cfg_path]
    with open(cfg_path, "r", encoding="utf-8") as f:
        main_config = yaml.load(
            f, Loader=lambda s: ConfigLoader(s, root_dir, stack)
        )

    return _resolve(main_config, root_dir, stack)


def load_config(cfg_path):
    """Load a configuration file to a dictionary.

    Parameters
    ----------
    cfg_path : str
        Path to the configuration file

    Returns
    -------
    dict
        Loaded and merged configuration dictionary
    """
    cfg_path = os.path.abspath(cfg_path)
    if not os.path.isfile(cfg_path):
        raise ConfigIncludeError(f"Configuration file not found: {cfg_path}")

    return _load_file(cfg_path, [])


def load_config_string(config_string, root_dir=None):
    """Load a configuration from a YAML string.

    Parameters
    ----------
    config_string : str
        YAML configuration
    root_dir : str, optional
        Directory used to resolve relative includes. Defaults to the current
        working directory.

    Returns
    -------
    dict
        Loaded and merged configuration dictionary
    """
    root_dir = root_dir if root_dir is not None else os.getcwd()
    main_config = yaml.load(config_string, Loader=lambda s: ConfigLoader(s, root_dir))

    return _resolve(main_config, root_dir, [])
