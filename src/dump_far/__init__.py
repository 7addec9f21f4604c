"""dump-far - find and replace in database dumps without breaking PHP serialized strings."""

from importlib.metadata import PackageNotFoundError, version

from dump_far.encoding_context import SUPPORTED_ENCODINGS, EncodingContext, count_units
from dump_far.errors import ConfigurationError, DumpFarError, DumpIOError, EncodingError
from dump_far.pipeline import ReplacementSpec, repair_replace, run_pipeline
from dump_far.scanner import Dialect

__all__ = [
    "SUPPORTED_ENCODINGS",
    "ConfigurationError",
    "Dialect",
    "DumpFarError",
    "DumpIOError",
    "EncodingContext",
    "EncodingError",
    "ReplacementSpec",
    "count_units",
    "repair_replace",
    "run_pipeline",
]

try:
    __version__ = version("dump-far")
except PackageNotFoundError:
    __version__ = "0.0.0"
