"""
SAME header decoding adapters for SAME Mesh Alerter.
"""

from .codes import event_description, event_significance, originator_description
from .header import SameHeaderError, is_end_of_message, parse_header
from .source import AlertSource, DecoderProcessSource, HeaderFileSource, parse_decoder_line

__all__ = [
    "event_description",
    "event_significance",
    "originator_description",
    "SameHeaderError",
    "is_end_of_message",
    "parse_header",
    "AlertSource",
    "DecoderProcessSource",
    "HeaderFileSource",
    "parse_decoder_line",
]
