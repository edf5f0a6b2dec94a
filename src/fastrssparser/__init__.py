import logging

from .dates import parse_date
from .exceptions import (
    InvalidDateFormat,
    MissingChannel,
    ParseError,
    StructuralMismatch,
    UnderlyingStreamError,
)
from .main import DEFAULT_MAX_DEPTH, RSSParser, parse_feed
from .models import (
    Category,
    Cloud,
    Enclosure,
    Extension,
    Feed,
    Guid,
    Image,
    Item,
    Source,
    TextInput,
)
from .namespaces import WELL_KNOWN_NAMESPACES, NamespaceResolver

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "WELL_KNOWN_NAMESPACES",
    "Category",
    "Cloud",
    "Enclosure",
    "Extension",
    "Feed",
    "Guid",
    "Image",
    "InvalidDateFormat",
    "Item",
    "MissingChannel",
    "NamespaceResolver",
    "ParseError",
    "RSSParser",
    "Source",
    "StructuralMismatch",
    "TextInput",
    "UnderlyingStreamError",
    "parse_date",
    "parse_feed",
]
