"""Demo entry point: route stdlib logging through a JsonFileTarget."""

import argparse
import logging
import random
import sys

from json_file_target.config import load_config
from json_file_target.handler import JsonFileHandler
from json_file_target.target import create_target

SAMPLE_EVENTS = [
    (logging.INFO, "User logged in"),
    (logging.INFO, "Request processed successfully"),
    (logging.DEBUG, "Cache miss for key"),
    (logging.WARNING, "Disk usage above threshold"),
    (logging.ERROR, "Connection timeout to upstream"),
]


def main(argv=None):
    parser = argparse.ArgumentParser(description="JSON file log target demo")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--count", type=int, default=20, help="records to emit")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    config = load_config(args.config)
    target = create_target(config)
    handler = JsonFileHandler(target)

    app_logger = logging.getLogger("demo")
    app_logger.setLevel(logging.DEBUG)
    app_logger.addHandler(handler)
    app_logger.propagate = False

    logger.info("Writing %d records to %s", args.count, config.log_file)
    for i in range(args.count):
        level, message = random.choice(SAMPLE_EVENTS)
        app_logger.log(level, message)

    app_logger.info({"event": "order_placed", "order_id": 1042, "amount": 19.99})
    try:
        raise ValueError("invalid payment token")
    except ValueError:
        app_logger.exception("Payment failed")

    handler.close()
    logger.info(
        "Done: %d flush(es), %d record(s) exported, %d failed export(s)",
        target.flush_count,
        target.exported_count,
        target.failed_exports,
    )


if __name__ == "__main__":
    main()
