"""G-code for the pin-bed machine.

Only three commands are used:

    G28 X Y       home X/Y, once at the start
    G0 X.. Y..    move over a pin
    G0 Z..        push the pin to a height, then back to 0

Pins at the base plane need no motion and are skipped. Undetermined pins
are pushed to the mean of the measured heights.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, List, Sequence

from .config import DEFAULT_PRECISION
from .errors import FallbackUndefinedError, IOFailureError
from .pins import PinRecord

logger = logging.getLogger(__name__)

HOME = "G28 X Y"


def fmt(value: float, precision: int = DEFAULT_PRECISION) -> str:
    s = f"{value:.{precision}f}"
    # "-0.000" is valid but noisy
    if float(s) == 0:
        s = f"{0:.{precision}f}"
    return s


def fallback_height(pins: Sequence[PinRecord]) -> float:
    """Mean of the measured (non-zero) heights; undetermined pins excluded."""
    measured = [p.height.z for p in pins if p.height.is_measured]
    if not measured:
        raise FallbackUndefinedError(
            "Undetermined pins need a fallback height, but no pin has a measured height."
        )
    return sum(measured) / len(measured)


def gcode_lines(pins: Sequence[PinRecord], precision: int = DEFAULT_PRECISION) -> List[str]:
    out = [HOME]

    fallback = None
    if any(p.height.is_undetermined for p in pins):
        fallback = fallback_height(pins)
        logger.info("Fallback height for undetermined pins: %s", fmt(fallback, precision))

    moved = 0
    for pin in pins:
        if pin.height.is_undetermined:
            z = fallback
        elif pin.height.is_measured:
            z = pin.height.z
        else:
            continue
        out.append(f"G0 X{fmt(pin.x, precision)} Y{fmt(pin.y, precision)}")
        out.append(f"G0 Z{fmt(z, precision)}")
        out.append(f"G0 Z{fmt(0.0, precision)}")
        moved += 1

    logger.info("%d of %d pins need motion", moved, len(pins))
    return out


def write_gcode(lines: Iterable[str], path) -> None:
    """Write the command stream to `path`, or stdout when path is "-"."""
    text = "\n".join(lines) + "\n"
    if str(path) == "-":
        try:
            sys.stdout.write(text)
            sys.stdout.flush()
        except OSError as exc:
            raise IOFailureError(f"Could not write G-code to stdout: {exc}") from exc
        return
    try:
        with open(path, "w") as f:
            f.write(text)
    except OSError as exc:
        raise IOFailureError(f"Could not write G-code to {path}: {exc}") from exc
    logger.info("Wrote %s", path)
