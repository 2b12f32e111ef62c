#!/usr/bin/env python3
"""Generate a sample employee CSV for POST /upload.

Writes the four-column header followed by rows with Faker-generated names,
unique employee ids (HAYHAH + 4 digits) and unique emails
(first.last[N]@yopmail.com).
"""

from __future__ import annotations

import argparse
import csv
import logging
import random
from collections.abc import Sequence
from pathlib import Path

from faker import Faker

from onboard.config import CSV_HEADER

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_OUTPUT = REPO_ROOT / "users.csv"
EMAIL_DOMAIN = "yopmail.com"
EMPLOYEE_ID_PREFIX = "HAYHAH"
# Ids are HAYHAH1000 .. HAYHAH9999
MAX_RECORDS = 9000


def unique_email(first_name: str, last_name: str, used: set[str]) -> str:
    """Return first.last@domain, adding a counter until it is unused."""
    counter = 0
    while True:
        suffix = str(counter) if counter else ""
        email = f"{first_name.lower()}.{last_name.lower()}{suffix}@{EMAIL_DOMAIN}"
        if email not in used:
            used.add(email)
            return email
        counter += 1


def unique_employee_id(rng: random.Random, used: set[str]) -> str:
    while True:
        employee_id = f"{EMPLOYEE_ID_PREFIX}{rng.randint(1000, 9999)}"
        if employee_id not in used:
            used.add(employee_id)
            return employee_id


def generate_rows(count: int, seed: int | None = None) -> list[list[str]]:
    """Generate count rows of [employee id, first, last, email].

    Raises:
        ValueError: If count is negative or exceeds MAX_RECORDS.
    """
    if count < 0 or count > MAX_RECORDS:
        raise ValueError(f"count must be between 0 and {MAX_RECORDS}, got {count}")

    fake = Faker()
    if seed is not None:
        fake.seed_instance(seed)
    rng = random.Random(seed)
    used_emails: set[str] = set()
    used_ids: set[str] = set()
    rows = []
    for _ in range(count):
        first_name = fake.first_name()
        last_name = fake.last_name()
        rows.append(
            [
                unique_employee_id(rng, used_ids),
                first_name,
                last_name,
                unique_email(first_name, last_name, used_emails),
            ]
        )
    return rows


def write_csv(path: Path, rows: list[list[str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fp:
        writer = csv.writer(fp, quoting=csv.QUOTE_ALL)
        writer.writerow(CSV_HEADER)
        writer.writerows(rows)
    return path


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a sample employee CSV")
    parser.add_argument("--count", type=int, default=2, help="Number of rows (default: 2)")
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"Destination path (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible output")
    args = parser.parse_args(argv)

    try:
        rows = generate_rows(args.count, args.seed)
    except ValueError as exc:
        parser.error(str(exc))

    write_csv(args.output, rows)
    logger.info("CSV file generated with %d records: %s", len(rows), args.output)
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
