"""
Text format for chaos game descriptions.

Example::

    # Barnsley fern
    -2.65 0 2.65 10                  # min x, min y, max x, max y
    0 0 0 0.16 0 0                   # affine: a00 a01 a10 a11 bx by
    0.85 0.04 -0.04 0.85 0 1.6
    0.2 -0.26 0.23 0.22 0 1.6
    -0.15 0.28 0.26 0.24 0 0.44
    probabilities 1 85 7 7

Julia transforms are written ``julia <re> <im> [<sign>]`` and the forward map
used for exploration ``explore <re> <im>``. Commas may separate numbers and
``#`` starts a comment.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..core.description import ChaosGameDescription
from ..core.linalg import Vector2D, Complex, Matrix2x2
from ..core.transforms import AffineTransform2D, JuliaTransform, ExploreJulia, Transform2D

logger = logging.getLogger(__name__)

JULIA_MARKER = 'julia'
EXPLORE_MARKER = 'explore'
PROBABILITIES_MARKER = 'probabilities'


class DescriptionFormatError(ValueError):
    """Malformed description text."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


def _tokens(line: str) -> List[str]:
    return line.split('#', 1)[0].replace(',', ' ').split()


def _floats(tokens: List[str], count: int, what: str, line_number: int) -> List[float]:
    if len(tokens) != count:
        raise DescriptionFormatError(
            f"{what} needs {count} numbers, got {len(tokens)}", line_number)
    try:
        return [float(token) for token in tokens]
    except ValueError:
        raise DescriptionFormatError(f"invalid number in {what}: {' '.join(tokens)}",
                                     line_number) from None


def _parse_transform(tokens: List[str], line_number: int) -> Transform2D:
    marker = tokens[0].lower()

    if marker == JULIA_MARKER:
        args = tokens[1:]
        sign = 1
        if len(args) == 3:
            try:
                sign = int(args.pop())
            except ValueError:
                raise DescriptionFormatError(f"invalid Julia sign: {tokens[3]}",
                                             line_number) from None
            if sign not in (-1, 1):
                raise DescriptionFormatError(f"Julia sign must be 1 or -1, got {sign}",
                                             line_number)
        real, imag = _floats(args, 2, "Julia transform", line_number)
        return JuliaTransform(Complex(real, imag), sign)

    if marker == EXPLORE_MARKER:
        real, imag = _floats(tokens[1:], 2, "explore transform", line_number)
        return ExploreJulia(Complex(real, imag))

    a00, a01, a10, a11, bx, by = _floats(tokens, 6, "affine transform", line_number)
    return AffineTransform2D(Matrix2x2(a00, a01, a10, a11), Vector2D(bx, by))


def parse_description(text: str) -> ChaosGameDescription:
    """
    Parse description text.

    Raises:
        DescriptionFormatError: If the text is malformed
        ValueError: If the parsed description violates its invariants
    """
    header = None
    transforms: List[Transform2D] = []
    probabilities = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        tokens = _tokens(line)
        if not tokens:
            continue

        if header is None:
            header = _floats(tokens, 4, "header", line_number)
        elif tokens[0].lower() == PROBABILITIES_MARKER:
            if probabilities is not None:
                raise DescriptionFormatError("probabilities given twice", line_number)
            try:
                probabilities = [int(token) for token in tokens[1:]]
            except ValueError:
                raise DescriptionFormatError("probabilities must be integers",
                                             line_number) from None
        else:
            transforms.append(_parse_transform(tokens, line_number))

    if header is None:
        raise DescriptionFormatError("missing header line with min and max coordinates")

    min_x, min_y, max_x, max_y = header
    return ChaosGameDescription(Vector2D(min_x, min_y), Vector2D(max_x, max_y),
                                transforms, probabilities)


def _format_transform(transform: Transform2D) -> str:
    if isinstance(transform, JuliaTransform):
        return f"{JULIA_MARKER} {transform.point.x!r} {transform.point.y!r} {transform.sign}"
    if isinstance(transform, ExploreJulia):
        return f"{EXPLORE_MARKER} {transform.point.x!r} {transform.point.y!r}"
    numbers = transform.matrix.to_tuple() + transform.vector.to_tuple()
    return ' '.join(repr(float(n)) for n in numbers)


def format_description(description: ChaosGameDescription) -> str:
    """Serialize a description; ``parse_description`` reads it back unchanged."""
    lo, hi = description.min_coords, description.max_coords
    lines = [
        f"{float(lo.x)!r} {float(lo.y)!r} {float(hi.x)!r} {float(hi.y)!r}",
    ]
    lines.extend(_format_transform(t) for t in description.transforms)
    if description.probabilities is not None:
        weights = ' '.join(str(p) for p in description.probabilities)
        lines.append(f"{PROBABILITIES_MARKER} {weights}")
    return '\n'.join(lines) + '\n'


def read_description(filepath: Union[str, Path]) -> ChaosGameDescription:
    """
    Read a description file.

    Raises:
        OSError: If the file cannot be read
        DescriptionFormatError: If the content is malformed
        ValueError: If the description is invalid
    """
    filepath = Path(filepath)
    description = parse_description(filepath.read_text(encoding='utf-8'))
    logger.info(f"Loaded description from {filepath} "
                f"({len(description.transforms)} transforms)")
    return description


def write_description(description: ChaosGameDescription, filepath: Union[str, Path]) -> None:
    """Write a description file, validating the description first."""
    description.validate()
    filepath = Path(filepath)
    filepath.write_text(format_description(description), encoding='utf-8')
    logger.info(f"Saved description: {filepath}")
