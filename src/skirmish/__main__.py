"""Entry point for running the demo encounter."""

import logging
import sys

from skirmish.config import get_settings
from skirmish.demo import run_demo


def main() -> None:
    """Play the demo encounter and log how it went."""
    settings = get_settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logging.info("Starting demo encounter (seed=%s)...", settings.initiative_seed)

    result, log = run_demo(settings)
    if log is not None:
        logging.info("\n%s", log.format_readable())

    logging.info(result.describe())


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(0)
