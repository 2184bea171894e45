import logging
import sys


def configure_logging(app):
    """Send the package's logs (app.logger included) to stderr at LOG_LEVEL.

    Call before anything touches ``app.logger`` so Flask does not attach its
    own default handler as well.
    """
    level = app.config.get("LOG_LEVEL", "INFO")
    root = logging.getLogger("tasktracker")
    root.setLevel(level)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)
