import csv
from decimal import Decimal
from typing import Iterable, TextIO

from models import AccountSnapshot, DECIMAL_PLACES

FIELDNAMES = ["client", "available", "held", "total", "locked"]


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly DECIMAL_PLACES fractional digits."""
    return f"{value:.{DECIMAL_PLACES}f}"


def write_accounts(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(FIELDNAMES)
    for snapshot in snapshots:
        writer.writerow([
            snapshot.client_id,
            format_decimal(snapshot.available),
            format_decimal(snapshot.held),
            format_decimal(snapshot.total),
            str(snapshot.locked).lower(),
        ])
