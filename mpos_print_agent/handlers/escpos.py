"""
ESC/POS Encoder
===============

Encoder for ESC/POS thermal printers (Epson, Star, Xprinter, Bixolon...).
Uses python-escpos' Dummy printer, which records the command bytes instead
of sending them, so the transport stays under our control.
"""

from typing import Optional

from escpos.constants import QR_ECLEVEL_L, QR_ECLEVEL_M, QR_ECLEVEL_Q, QR_ECLEVEL_H, QR_MODEL_1, QR_MODEL_2
from escpos.printer import Dummy

from .base import CommandEncoder
from ..config import ESCPOS_PROFILE


class EscposEncoder(CommandEncoder):
    """Encoder backed by ``escpos.printer.Dummy``."""

    QR_CORRECTION = {
        'L': QR_ECLEVEL_L,
        'M': QR_ECLEVEL_M,
        'Q': QR_ECLEVEL_Q,
        'H': QR_ECLEVEL_H,
    }
    QR_MODELS = {
        1: QR_MODEL_1,
        2: QR_MODEL_2,
    }
    CUT_MODES = {
        'full': 'FULL',
        'partial': 'PART',
    }

    def __init__(self, profile: Optional[str] = ESCPOS_PROFILE):
        if profile:
            self._printer = Dummy(profile=profile)
        else:
            self._printer = Dummy()

    def initialize(self):
        self._printer.hw('INIT')

    def align(self, side: str):
        self._printer.set(align=side)

    def bold(self, on: bool):
        self._printer.set(bold=on)

    def size(self, width: int, height: int):
        self._printer.set(width=width, height=height, custom_size=True)

    def line(self, text: str):
        self._printer.textln(text)

    def feed(self, lines: int):
        self._printer.ln(lines)

    def barcode(self, value: str, symbology: str, height: int, width: int, position: str):
        bc = symbology.upper()
        # python-escpos expects Code128 data to name its code set, e.g. '{B'
        if bc == 'CODE128' and not value.startswith('{'):
            value = '{B' + value
        self._printer.barcode(value, bc, height=height, width=width, pos=position.upper())

    def qrcode(self, value: str, model: int, size: int, correction: str):
        self._printer.qr(
            value,
            ec=self.QR_CORRECTION[correction.upper()],
            size=size,
            model=self.QR_MODELS[model],
            native=True,
        )

    def cut(self, mode: str):
        self._printer.cut(mode=self.CUT_MODES[mode])

    def output(self) -> bytes:
        return self._printer.output
