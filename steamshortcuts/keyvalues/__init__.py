# KeyValues (VDF) codecs
from . import binary, text
from ..errors import FormatError

__all__ = ['binary', 'text', 'FormatError']
