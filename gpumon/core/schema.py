"""Column layout derived from the device count.

Display and CSV headers are pure functions of the number of devices so the
live table and the log always agree with each sample's readings.
"""

from typing import List

CSV_TIMESTAMP_COLUMN = "Timestamp"


def display_headers(device_count: int) -> List[str]:
    headers: List[str] = []
    for i in range(device_count):
        headers += [f"id {i} mem", f"id {i} usage"]
    return headers


def csv_headers(device_count: int) -> List[str]:
    headers = [CSV_TIMESTAMP_COLUMN]
    for i in range(device_count):
        headers += [f"id {i} mem used", f"id {i} usage"]
    return headers
