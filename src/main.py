import logging
import os
import sys

from engine import PaymentsEngine
from reader import TransactionParseError, read_transactions_file
from writer import write_accounts

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "WARNING"


def log_level_from_env() -> str:
    level = os.environ.get("PAYMENTS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    # getLevelName maps known names to their numeric level
    if not isinstance(logging.getLevelName(level), int):
        return DEFAULT_LOG_LEVEL
    return level


def configure_logging() -> None:
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def run(filepath: str) -> int:
    engine = PaymentsEngine()
    try:
        engine.process(read_transactions_file(filepath))
    except (OSError, TransactionParseError) as e:
        logger.error(f"Failed to process {filepath}: {e}")
        return 1

    write_accounts(engine.snapshot(), sys.stdout)
    return 0


def main():
    configure_logging()

    if len(sys.argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        sys.exit(1)

    sys.exit(run(sys.argv[1]))


if __name__ == "__main__":
    main()
