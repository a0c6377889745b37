import argparse
import logging
import sys

from storer.config import get_settings
from storer.errors import StorerError
from storer.pipeline import StorePipeline
from storer.report_reader import SUPPORTED_FORMATS


logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Store an execution result read from stdin")
    parser.add_argument(
        "--format",
        default="json",
        choices=SUPPORTED_FORMATS,
        help="Wire format of the execution result on stdin",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    try:
        settings = get_settings()
        logging.getLogger().setLevel(getattr(logging, settings.log_level.upper(), logging.WARNING))
        StorePipeline(settings).run(sys.stdin.buffer, fmt=args.format)
    except StorerError as exc:
        logger.debug("run aborted", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(exc.exit_code) from exc


if __name__ == "__main__":
    main()
