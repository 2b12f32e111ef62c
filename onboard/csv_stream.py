"""Employee Onboarding - Streaming CSV decoder.

Turns an open text stream into a lazy, single-pass iterator of row
mappings (column name -> string value). The first line is the header.
The iterator ends normally at end of stream or raises DecodeFailure as
its terminal error (bad quoting, undecodable bytes); it must not be
iterated again after either outcome.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator
from typing import TextIO

from onboard.errors import DecodeFailure

RawRow = dict[str, str | None]


def iter_csv_rows(stream: TextIO) -> Iterator[RawRow]:
    """Yield one mapping per CSV data row.

    Short rows yield None for the missing columns; surplus values of long
    rows are dropped. Blank lines are skipped.

    Args:
        stream: Text stream opened with newline="".

    Yields:
        Row mapping keyed by header column name.

    Raises:
        DecodeFailure: On malformed CSV or undecodable input.
    """
    reader = csv.DictReader(stream, strict=True)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise DecodeFailure(str(e), reader.line_num) from e
        except UnicodeDecodeError as e:
            raise DecodeFailure(f"invalid text encoding: {e.reason}", reader.line_num) from e

        row.pop(None, None)
        yield row
