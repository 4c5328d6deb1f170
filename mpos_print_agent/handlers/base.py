"""
Base Encoder
============

Abstract base class for command encoders: the collaborator that turns
print directives into a printer's binary command set.
"""

from abc import ABC, abstractmethod


class CommandEncoder(ABC):
    """Accumulates printer commands and hands back the finished bytes."""

    @abstractmethod
    def initialize(self):
        """Reset the printer to its power-on state."""
        pass

    @abstractmethod
    def align(self, side: str):
        """Set justification: 'left', 'center' or 'right'."""
        pass

    @abstractmethod
    def bold(self, on: bool):
        pass

    @abstractmethod
    def size(self, width: int, height: int):
        """Set character magnification, 1-8 in each direction."""
        pass

    @abstractmethod
    def line(self, text: str):
        """Print ``text`` followed by a line feed."""
        pass

    @abstractmethod
    def feed(self, lines: int):
        pass

    @abstractmethod
    def barcode(self, value: str, symbology: str, height: int, width: int, position: str):
        """
        Print a 1D barcode.

        Args:
            value: Data to encode
            symbology: Lower-case name, e.g. 'code128', 'ean13'
            height: Bar height in dots
            width: Module width, 2-6
            position: Human readable text: 'below', 'above', 'both', 'off'
        """
        pass

    @abstractmethod
    def qrcode(self, value: str, model: int, size: int, correction: str):
        """
        Print a QR code.

        Args:
            value: Data to encode
            model: QR model 1 or 2
            size: Module size in dots
            correction: Error correction level 'L', 'M', 'Q' or 'H'
        """
        pass

    @abstractmethod
    def cut(self, mode: str):
        """Cut the paper: 'full' or 'partial'."""
        pass

    @abstractmethod
    def output(self) -> bytes:
        """Bytes accumulated so far."""
        pass
