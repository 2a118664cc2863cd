"""
KSUID - K-Sortable Unique Identifier.

Frame snapshots and tracked errors carry one of these so log lines from the
SSE stream, the event file and the crash log can be correlated and ordered.
Format: 4 bytes timestamp + 16 bytes random = 27 char base62 string.
"""

import os
import struct
import time

# KSUID epoch: 2014-05-13
KSUID_EPOCH = 1400000000
KSUID_LENGTH = 27
BASE62 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def generate_ksuid():
    """Generate a 27-character sortable unique ID."""
    raw = struct.pack(">I", int(time.time()) - KSUID_EPOCH) + os.urandom(16)
    n = int.from_bytes(raw, byteorder="big")

    chars = []
    while n > 0:
        n, remainder = divmod(n, 62)
        chars.append(BASE62[remainder])

    return "".join(reversed(chars)).rjust(KSUID_LENGTH, "0")
