"""Universe identifiers tracked by the snapshot when no ids file is given."""

import json
from typing import List

DEFAULT_UNIVERSE_IDS = [
    8649112027, 8641794993, 8617745696,
    8470216398, 8120277194, 8030001602,
    6431757712, 7016268111, 6789766645,
    6614175388, 6528524000, 6463581673,
    7096838238, 7166097502, 7517851351,
    7626153268, 7072328729, 6743843913,
    7334543566, 6829990681, 7263505269,
    7401898945, 7309264740, 7456466538,
    3071634329, 4800580998, 7288212525,
    2505069317, 5049176019, 2946951335,
    7424382390, 7168683817, 7349366409,
    8154106881, 7923536197, 8091666772,
    8631229462, 8385096583, 8975568157,
    9237378322, 6903750207, 7150443063,
    8283618573, 8099904322, 9323921130,
    9294279969, 8683739287, 8751472252,
    8716119014, 8204633083,
]


def parse_universe_ids(text: str) -> List[int]:
    """
    Parse universe ids from a JSON array or one id per line

    Blank lines and lines starting with '#' are ignored in the line format.
    Order and duplicates are preserved.

    Args:
        text: File contents

    Returns:
        List[int]: Universe ids in file order
    """
    stripped = text.strip()
    if stripped.startswith("["):
        data = json.loads(stripped)
        if not all(isinstance(v, int) and not isinstance(v, bool) for v in data):
            raise ValueError("JSON ids file must be an array of integers")
        return list(data)

    ids = []
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            ids.append(int(line))
        except ValueError as e:
            raise ValueError(f"Line {lineno}: not an integer id: {line!r}") from e
    return ids


def load_universe_ids(filepath: str) -> List[int]:
    """Load universe ids from a file (see parse_universe_ids)"""
    with open(filepath, "r") as f:
        return parse_universe_ids(f.read())
