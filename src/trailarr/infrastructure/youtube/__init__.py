from .codecs import CodecPolicy
from .format_selector import FormatSelection, select_formats
from .innertube import InnertubeStrategy
from .watch_page import WatchPageStrategy

__all__ = [
    "CodecPolicy",
    "FormatSelection",
    "InnertubeStrategy",
    "WatchPageStrategy",
    "select_formats",
]
