"""CLI entry point which builds the CRT reconstruction chain from a
configuration file."""

import argparse
import sys
from typing import List, Optional

from crtkit.driver import Driver
from crtkit.utils.config import load_config, parse_value, set_nested_value
from crtkit.utils.logger import logger
from crtkit.version import __version__


def main(config: str, config_overrides: Optional[List[str]] = None) -> Driver:
    """Builds the reconstruction chain described by a configuration file.

    Parameters
    ----------
    config : str
        Path to the configuration file
    config_overrides : List[str], optional
        List of config overrides in the form "key.path=value"

    Returns
    -------
    Driver
        Configured driver
    """
    # Load the configuration file
    cfg = load_config(config)

    # Apply any generic config overrides from --set arguments
    for override in config_overrides or []:
        if "=" not in override:
            raise ValueError(
                f"Invalid --set format: '{override}'. "
                f"Expected format: 'key.path=value'"
            )

        key_path, value_str = override.split("=", 1)
        cfg = set_nested_value(cfg, key_path.strip(), parse_value(value_str.strip()))

    # Build the driver, which checks the post-processor chain
    driver = Driver(cfg)
    logger.info("Post-processor chain: %s", ", ".join(driver.post.modules))

    return driver


def cli(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="CRT reconstruction: CRT/TPC track matching and CRT simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  crtkit -c config.yaml                                   Check a configuration
  crtkit -c config.yaml --set post.crt_t0_match.min_pe=10 Override a parameter
""",
    )

    parser.add_argument(
        "--version", "-v", action="version", version=f"crtkit {__version__}"
    )

    parser.add_argument(
        "-c", "--config", required=True, help="Path to the configuration file"
    )

    # Add option to dynamically override any config parameter using dot notation
    parser.add_argument(
        "--set",
        action="append",
        dest="config_overrides",
        metavar="KEY=VALUE",
        help="Override any config parameter using dot notation "
        "(e.g., --set post.crt_sim.dead_time=20000). "
        "Can be used multiple times for multiple overrides.",
    )

    args = parser.parse_args(argv)
    main(config=args.config, config_overrides=args.config_overrides)


if __name__ == "__main__":
    cli(sys.argv[1:])
