"""
testpmd Output Verification

Parses the accumulated forward statistics that testpmd prints on exit and
checks that traffic flowed in both directions. The block looks like:

    +++++++++++++++ Accumulated forward statistics for all ports+++++++++++++++
    RX-packets: 120            RX-dropped: 0             RX-total: 120
    TX-packets: 98             TX-dropped: 0             TX-total: 98
"""

import re
from dataclasses import dataclass

STATS_MARKER = "all ports"
RECORD_FIELDS = 6
COUNT_FIELD = 5
COUNT_PATTERN = re.compile(r"[+-]?[0-9]+")


class VerificationError(Exception):
    """Raised when testpmd output does not show traffic in both directions."""
    pass


class MalformedStatsError(VerificationError):
    """A statistics record does not have the expected shape."""
    pass


class NoTrafficError(VerificationError):
    """A direction reported zero (or negative) packets."""

    def __init__(self, direction: str, count: int):
        self.direction = direction
        self.count = count
        noun = "received" if direction == "rx" else "transmitted"
        super().__init__(
            f"number of {noun} packets ({direction}) should be greater than 0, got {count}"
        )


class MissingStatsError(VerificationError):
    """The statistics marker never appeared in the output."""
    pass


@dataclass(frozen=True)
class TrafficStats:
    """Packet totals taken from the accumulated statistics block."""
    rx_packets: int
    tx_packets: int


def parse_record(line: str | None, direction: str) -> int:
    """
    Extract the packet total from one statistics record.

    Raises:
        MalformedStatsError: Missing line, wrong field count or non-integer total
    """
    if line is None:
        raise MalformedStatsError(f"{direction} record missing after '{STATS_MARKER}' line")

    fields = line.split()
    if len(fields) != RECORD_FIELDS:
        raise MalformedStatsError(
            f"{direction} record should contain {RECORD_FIELDS} fields, "
            f"got {len(fields)}: {line.strip()!r}"
        )

    count = fields[COUNT_FIELD]
    # optional sign, ASCII digits only
    if not COUNT_PATTERN.fullmatch(count):
        raise MalformedStatsError(
            f"{direction} record has a non-integer packet count "
            f"{count!r}: {line.strip()!r}"
        )
    return int(count)


def check_rx_tx(output: str, require_marker: bool = False) -> TrafficStats | None:
    """
    Verify that packets passed the NIC RX and TX queues.

    Only the first statistics block is checked. When no block is present the
    output is accepted and None is returned, unless `require_marker` is set.

    Args:
        output: Combined stdout/stderr of the testpmd wrapper script
        require_marker: Treat a missing statistics block as a failure

    Returns:
        The parsed totals, or None if no statistics block was found

    Raises:
        MalformedStatsError: A record is missing or malformed
        NoTrafficError: A direction has a non-positive count
        MissingStatsError: No block found and `require_marker` is set
    """
    lines = output.split("\n")

    for i, line in enumerate(lines):
        if STATS_MARKER not in line:
            continue

        rx_line = lines[i + 1] if i + 1 < len(lines) else None
        rx = parse_record(rx_line, "rx")
        if rx <= 0:
            raise NoTrafficError("rx", rx)

        tx_line = lines[i + 2] if i + 2 < len(lines) else None
        tx = parse_record(tx_line, "tx")
        if tx <= 0:
            raise NoTrafficError("tx", tx)

        return TrafficStats(rx_packets=rx, tx_packets=tx)

    if require_marker:
        raise MissingStatsError(f"no '{STATS_MARKER}' statistics found in output")
    return None
