# buddhabrot/utils.py
import re

VERBOSE = False


def set_verbose(flag: bool):
    global VERBOSE
    VERBOSE = bool(flag)


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


def parse_size(s: str) -> tuple:
    """
    Parse strings like '1024x768' or '512' (square) into (width, height).
    """
    s = s.strip().lower().replace(" ", "")
    m = re.fullmatch(r"(\d+)(?:x(\d+))?", s)
    if m is None:
        raise ValueError(f"Cannot parse image size: {s!r}")
    width = int(m.group(1))
    height = int(m.group(2)) if m.group(2) else width
    return width, height
