"""
MPOS Print Agent Encoders
=========================

Command encoders for different printer command sets.
"""

from .base import CommandEncoder
from .escpos import EscposEncoder

__all__ = ['CommandEncoder', 'EscposEncoder', 'get_encoder']

# Encoder registry
ENCODERS = {
    'escpos': EscposEncoder,
}


def get_encoder(encoder_type: str) -> type:
    """Get encoder class by type."""
    return ENCODERS.get(encoder_type)
