"""Event-driven scanning of HTML and XML documents.

``scan`` walks a document in document order and reports what it sees to a
``TagHandler``: every start tag (with its attributes and the character offset
just past the tag), every piece of character data, and finally the end of
the document.  Parsing is done by BeautifulSoup, which copes with the
malformed markup real ADFS pages are made of.

A new tree is built for every call, so one handler/document pair never
shares parser state with another and scans may run from several threads.
"""

import re

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.dammit import UnicodeDammit
from bs4.element import NavigableString, PreformattedString, Tag

HTML = "html.parser"
XML = "xml"

# A start tag up to its closing ">", skipping over quoted attribute values.
_START_TAG = re.compile(r"""<[^\s/>]+(?:"[^"]*"|'[^']*'|[^'">])*>""")


class TagHandler:
    """Callback set for ``scan``.  Override only what you need."""

    def on_open_tag(self, name, attrs, offset):
        pass

    def on_text(self, text):
        pass

    def on_error(self, cause):
        pass

    def on_end(self):
        pass


def decode_document(document):
    """Return *document* as text, sniffing the encoding of byte input."""
    if isinstance(document, bytes):
        return UnicodeDammit(document).unicode_markup
    return document


def scan(document, handler, features=HTML):
    """Drive *handler* over *document* and return the handler.

    With ``features=HTML`` tag names are lowercased, so matching on them is
    case-insensitive.  With ``features=XML`` names keep their case.

    Offsets passed to ``on_open_tag`` index into the decoded document text;
    they are ``None`` when the tree builder does not record source positions.
    A document the parser rejects outright is reported through ``on_error``
    and nothing else is called afterwards.
    """
    text = decode_document(document)
    # lxml reads the encoding declaration of XML itself
    markup = document if features == XML else text
    try:
        soup = BeautifulSoup(markup, features, multi_valued_attributes=None)
    except ParserRejectedMarkup as exc:
        handler.on_error(exc)
        return handler

    line_starts = _line_starts(text)
    for node in soup.descendants:
        if isinstance(node, Tag):
            handler.on_open_tag(node.name, dict(node.attrs), _tag_end(text, line_starts, node))
        elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            handler.on_text(str(node))

    handler.on_end()
    return handler


def _line_starts(text):
    starts = [0]
    for match in re.finditer("\n", text):
        starts.append(match.end())
    return starts


def _tag_end(text, line_starts, tag):
    """Offset of the first character after *tag*'s start tag, if known."""
    if tag.sourceline is None or tag.sourcepos is None:
        return None
    if tag.sourceline > len(line_starts):
        return None

    start = line_starts[tag.sourceline - 1] + tag.sourcepos
    match = _START_TAG.match(text, start)
    if not match:
        return None
    return match.end()

