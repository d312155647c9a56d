"""Syndication format detection.

Detection only looks at the root element of a payload. Parsing, and with it
the rejection of malformed documents, is left to the parser registered for
the detected format.
"""

import io
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from lxml import etree

from feed_sync.errors import UnknownFormat
from feed_sync.models.schemas import FormatKind, ParsedFeed
from feed_sync.services.feed_parser import parse_atom, parse_rss

ATOM_NAMESPACES = (
    "http://www.w3.org/2005/Atom",
    "http://purl.org/atom/ns#",  # Atom 0.3
)


@dataclass(frozen=True)
class RootElement:
    """Local name, namespace and attributes of a document's root element."""

    name: str
    namespace: str
    attributes: dict


@dataclass(frozen=True)
class FormatHandler:
    kind: FormatKind
    matches: Callable[[RootElement], bool]
    parser: Callable[[bytes], ParsedFeed]


def sniff_root(payload: bytes) -> Optional[RootElement]:
    """Read the first start tag of an XML payload.

    The parser recovers from errors and stops at the first element, so a
    truncated or otherwise broken document is still identified.

    Returns:
        RootElement, or None if the payload has no element
    """
    if not payload:
        return None

    events = etree.iterparse(
        io.BytesIO(payload),
        events=("start",),
        recover=True,
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
    )
    try:
        for _, element in events:
            qname = etree.QName(element)
            return RootElement(
                name=qname.localname,
                namespace=qname.namespace or "",
                attributes=dict(element.attrib),
            )
    except etree.LxmlError:
        return None
    return None


def is_rss(root: RootElement) -> bool:
    return root.name == "rss"


def is_atom(root: RootElement) -> bool:
    return root.name == "feed" and root.namespace in ATOM_NAMESPACES


def default_handlers() -> List[FormatHandler]:
    return [
        FormatHandler(FormatKind.RSS, is_rss, parse_rss),
        FormatHandler(FormatKind.ATOM, is_atom, parse_atom),
    ]


class FormatDetector:
    """Classifies payloads and dispatches them to format parsers.

    Handlers are (kind, predicate, parser) triples checked in registration
    order. Adding a format means registering a handler; the sync pipeline
    does not change.
    """

    def __init__(self, handlers: Optional[Iterable[FormatHandler]] = None):
        self._handlers: List[FormatHandler] = []
        for handler in default_handlers() if handlers is None else handlers:
            self.register(handler.kind, handler.matches, handler.parser)

    def register(
        self,
        kind: FormatKind,
        matches: Callable[[RootElement], bool],
        parser: Callable[[bytes], ParsedFeed],
    ) -> None:
        """Register a predicate/parser pair, replacing any handler for kind."""
        self._handlers = [h for h in self._handlers if h.kind != kind]
        self._handlers.append(FormatHandler(kind, matches, parser))

    @property
    def kinds(self) -> List[FormatKind]:
        return [h.kind for h in self._handlers]

    def detect(self, payload: bytes) -> FormatKind:
        """Classify a payload by its root element.

        Raises:
            UnknownFormat: If no registered predicate matches
        """
        root = sniff_root(payload)
        if root is not None:
            for handler in self._handlers:
                if handler.matches(root):
                    return handler.kind

        found = f"<{root.name}>" if root is not None else "no root element"
        raise UnknownFormat(f"unknown syndication format ({found})")

    def parse(self, kind: FormatKind, payload: bytes) -> ParsedFeed:
        """Parse a payload with the parser registered for kind.

        Raises:
            UnknownFormat: If no parser is registered for kind
            ParseFailed: If the payload is malformed
        """
        for handler in self._handlers:
            if handler.kind == kind:
                return handler.parser(payload)
        raise UnknownFormat(f"no parser registered for {kind}")
