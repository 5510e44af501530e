import logging
import sys

# Library code only logs to logging.getLogger("gravixlayer"); handlers are
# installed by applications, e.g. the CLI.


def configure_logging(debug: bool = False):
    """Configures standard Python logging for command line use.

    The SDK logs retries at WARNING, so those are shown by default. ``debug``
    also shows request-level details from the SDK and httpx.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s logger=%(name)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
