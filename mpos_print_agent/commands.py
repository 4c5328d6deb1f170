"""
Command Stream
==============

Ordered list of print directives built with a fluent API and rendered once
into bytes by a command encoder. The stream knows nothing about the
printer's binary protocol; each directive just calls the matching encoder
method.

Usage:
    stream = (CommandStream()
              .initialize()
              .align('center').bold(True).line('MART POS').bold(False)
              .newline(3)
              .cut('partial'))
    data = stream.encode()
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .config import ENCODER
from .exceptions import CommandStreamFinalizedError
from .handlers import CommandEncoder, get_encoder

ALIGNMENTS = ('left', 'center', 'right')
CUT_MODES = ('full', 'partial')
BARCODE_POSITIONS = ('below', 'above', 'both', 'off')
QR_CORRECTIONS = ('L', 'M', 'Q', 'H')


# =============================================================================
# Directives
# =============================================================================

@dataclass(frozen=True)
class Initialize:
    def apply(self, encoder: CommandEncoder):
        encoder.initialize()


@dataclass(frozen=True)
class Align:
    side: str

    def apply(self, encoder: CommandEncoder):
        encoder.align(self.side)


@dataclass(frozen=True)
class Bold:
    on: bool

    def apply(self, encoder: CommandEncoder):
        encoder.bold(self.on)


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    def apply(self, encoder: CommandEncoder):
        encoder.size(self.width, self.height)


@dataclass(frozen=True)
class Line:
    text: str

    def apply(self, encoder: CommandEncoder):
        encoder.line(self.text)


@dataclass(frozen=True)
class Feed:
    lines: int

    def apply(self, encoder: CommandEncoder):
        encoder.feed(self.lines)


@dataclass(frozen=True)
class Barcode:
    value: str
    symbology: str = 'code128'
    height: int = 60
    width: int = 3
    position: str = 'below'

    def apply(self, encoder: CommandEncoder):
        encoder.barcode(self.value, self.symbology, self.height, self.width, self.position)


@dataclass(frozen=True)
class QrCode:
    value: str
    model: int = 2
    size: int = 3
    correction: str = 'M'

    def apply(self, encoder: CommandEncoder):
        encoder.qrcode(self.value, self.model, self.size, self.correction)


@dataclass(frozen=True)
class Cut:
    mode: str = 'partial'

    def apply(self, encoder: CommandEncoder):
        encoder.cut(self.mode)


# =============================================================================
# Stream
# =============================================================================

def _default_encoder() -> CommandEncoder:
    encoder_class = get_encoder(ENCODER)
    if encoder_class is None:
        raise ValueError(f"Unknown encoder: {ENCODER}")
    return encoder_class()


class CommandStream:
    """Append-only directive list; ``encode()`` finalizes it."""

    def __init__(self, encoder_factory: Optional[Callable[[], CommandEncoder]] = None):
        self._encoder_factory = encoder_factory or _default_encoder
        self._directives: List[object] = []
        self._encoded: Optional[bytes] = None

    @property
    def directives(self) -> Tuple[object, ...]:
        return tuple(self._directives)

    @property
    def finalized(self) -> bool:
        return self._encoded is not None

    def _append(self, directive) -> 'CommandStream':
        if self._encoded is not None:
            raise CommandStreamFinalizedError(
                f"Cannot add {type(directive).__name__} after encode()"
            )
        self._directives.append(directive)
        return self

    def initialize(self) -> 'CommandStream':
        return self._append(Initialize())

    def align(self, side: str) -> 'CommandStream':
        if side not in ALIGNMENTS:
            raise ValueError(f"Invalid alignment: {side}")
        return self._append(Align(side))

    def bold(self, on: bool = True) -> 'CommandStream':
        return self._append(Bold(bool(on)))

    def size(self, width: int = 1, height: int = 1) -> 'CommandStream':
        if not (1 <= width <= 8 and 1 <= height <= 8):
            raise ValueError(f"Invalid text size: {width}x{height}")
        return self._append(Size(width, height))

    def line(self, text: str = '') -> 'CommandStream':
        return self._append(Line(text))

    def newline(self, count: int = 1) -> 'CommandStream':
        if count < 1:
            raise ValueError(f"Invalid feed count: {count}")
        return self._append(Feed(count))

    def barcode(self, value: str, symbology: str = 'code128', height: int = 60,
                width: int = 3, position: str = 'below') -> 'CommandStream':
        if position not in BARCODE_POSITIONS:
            raise ValueError(f"Invalid barcode text position: {position}")
        return self._append(Barcode(str(value), symbology.lower(), height, width, position))

    def qrcode(self, value: str, model: int = 2, size: int = 3, correction: str = 'M') -> 'CommandStream':
        if model not in (1, 2):
            raise ValueError(f"Invalid QR model: {model}")
        if correction.upper() not in QR_CORRECTIONS:
            raise ValueError(f"Invalid QR correction level: {correction}")
        return self._append(QrCode(str(value), model, size, correction.upper()))

    def cut(self, mode: str = 'partial') -> 'CommandStream':
        if mode not in CUT_MODES:
            raise ValueError(f"Invalid cut mode: {mode}")
        return self._append(Cut(mode))

    def encode(self) -> bytes:
        """
        Render the directives into bytes.

        The first call finalizes the stream; later calls return the same
        buffer and further directives raise CommandStreamFinalizedError.
        """
        if self._encoded is None:
            encoder = self._encoder_factory()
            for directive in self._directives:
                directive.apply(encoder)
            self._encoded = bytes(encoder.output())
        return self._encoded
