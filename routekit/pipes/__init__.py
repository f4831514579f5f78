"""Parameter pipes: transform or validate handler arguments."""

from routekit.pipes.chain import PipeChain, extract_raw, resolve_arguments
from routekit.pipes.parse import ParseBoolPipe, ParseFloatPipe, ParseIntPipe
from routekit.pipes.validation import ValidationPipe

__all__ = [
    "ParseBoolPipe",
    "ParseFloatPipe",
    "ParseIntPipe",
    "PipeChain",
    "ValidationPipe",
    "extract_raw",
    "resolve_arguments",
]
