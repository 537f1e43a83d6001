"""Extraction of thesis authors and affiliation from repository item pages."""

from __future__ import annotations

import re
import socket
import urllib.error
import urllib.request
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Callable

_VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "source", "track", "wbr",
    }
)
_BREADCRUMB_CLASSES = frozenset({"container", "breadcrumb", "my-0"})


class ScrapingError(Exception):
    """Raised when an item page cannot be fetched or understood."""


@dataclass
class Person:
    """An author with the item link and academic affiliation."""

    author: str
    uri: str
    facultad: str
    carrera: str


class _LinkTextParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.links: list[str] = []
        self._stack: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag not in _VOID_ELEMENTS:
            self._stack.append(tag)

    def handle_endtag(self, tag):
        if tag in self._stack:
            while self._stack.pop() != tag:
                pass

    def handle_data(self, data):
        if self._stack and self._stack[-1] == "a":
            text = data.strip()
            if text:
                self.links.append(text)


def parse_breadcrumb(breadcrumb_html: str) -> tuple[str, str]:
    """Return (facultad, carrera): the third and second last link texts."""
    parser = _LinkTextParser()
    parser.feed(breadcrumb_html)
    parser.close()
    links = parser.links
    if len(links) >= 3:
        return links[-3], links[-2]
    return "", ""


class _TableParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.uri = ""
        self.authors: list[str] = []
        self._row: list[str] = []
        self._in_row = False
        self._cell_pending = False

    def _take_cell(self, text: str = "") -> bool:
        # A cell's value is whatever token follows its opening tag; that token
        # is consumed by the cell.
        if not self._cell_pending:
            return False
        self._cell_pending = False
        self._row.append(text.strip())
        return True

    def handle_starttag(self, tag, attrs):
        if self._take_cell():
            return
        if tag == "tr":
            self._in_row = True
            self._row = []
        elif tag == "td" and self._in_row:
            self._cell_pending = True

    def handle_startendtag(self, tag, attrs):
        self._take_cell()

    def handle_endtag(self, tag):
        if self._take_cell():
            return
        if tag == "tr":
            self._in_row = False
            if len(self._row) >= 2:
                key, value = self._row[0], self._row[1]
                if key == "dc.identifier.uri":
                    self.uri = value
                elif key == "dc.contributor.author":
                    self.authors.append(value)

    def handle_data(self, data):
        self._take_cell(data)

    def handle_comment(self, data):
        self._take_cell(data)


def parse_table(tbody_html: str, facultad: str, carrera: str) -> list[Person]:
    """Build one Person per ``dc.contributor.author`` row of a metadata table."""
    parser = _TableParser()
    parser.feed(tbody_html)
    parser.close()
    return [Person(author, parser.uri, facultad, carrera) for author in parser.authors]


class _OuterHTMLFinder(HTMLParser):
    def __init__(self, source: str, match: Callable[[str, dict], bool]) -> None:
        super().__init__(convert_charrefs=True)
        self._source = source
        self._match = match
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", source)]
        self._start: int | None = None
        self._tag = ""
        self._depth = 0
        self.result: str | None = None

    def _offset(self) -> int:
        line, col = self.getpos()
        return self._line_starts[line - 1] + col

    def handle_starttag(self, tag, attrs):
        if self.result is not None:
            return
        if self._start is None:
            if self._match(tag, dict(attrs)):
                self._start = self._offset()
                self._tag = tag
                self._depth = 1
        elif tag == self._tag:
            self._depth += 1

    def handle_startendtag(self, tag, attrs):
        if self.result is None and self._start is None and self._match(tag, dict(attrs)):
            start = self._offset()
            end = self._source.find(">", start) + 1
            self.result = self._source[start:end]

    def handle_endtag(self, tag):
        if self.result is not None or self._start is None or tag != self._tag:
            return
        self._depth -= 1
        if self._depth == 0:
            end = self._source.find(">", self._offset()) + 1
            self.result = self._source[self._start:end]

    def finish(self) -> str | None:
        self.close()
        if self.result is None and self._start is not None:
            self.result = self._source[self._start:]
        return self.result


def _outer_html(source: str, match: Callable[[str, dict], bool]) -> str:
    finder = _OuterHTMLFinder(source, match)
    finder.feed(source)
    return finder.finish() or ""


def _is_breadcrumb(tag: str, attrs: dict) -> bool:
    classes = set((attrs.get("class") or "").split())
    return tag == "ol" and _BREADCRUMB_CLASSES <= classes


def persons_from_page(page_html: str, estudio: str) -> list[Person]:
    """Extract the authors of a full item page for the given study level."""
    tbody_html = _outer_html(page_html, lambda tag, attrs: tag == "tbody")
    if not tbody_html:
        raise ScrapingError("no se encontró el elemento <tbody> en la página")
    breadcrumb_html = _outer_html(page_html, _is_breadcrumb)
    if not breadcrumb_html:
        raise ScrapingError("no se encontró el breadcrumb en la página")

    facultad, carrera = parse_breadcrumb(breadcrumb_html)
    if estudio != "Pregrado":
        carrera = f"de la Maestría de {estudio}"
    else:
        carrera = f"de la Carrera de {carrera}"

    persons = parse_table(tbody_html, facultad, carrera)
    if not persons:
        raise ScrapingError("no se encontraron personas en la tabla")
    return persons


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return True
    reason = getattr(exc, "reason", None)
    return isinstance(reason, (socket.timeout, TimeoutError))


def scrape(url: str, estudio: str, timeout: float = 30.0) -> list[Person]:
    """Download the full view of an item and extract its authors."""
    try:
        with urllib.request.urlopen(url + "/full", timeout=timeout) as response:
            charset = response.headers.get_content_charset() or "utf-8"
            page_html = response.read().decode(charset, errors="replace")
    except (urllib.error.URLError, OSError) as exc:
        if _is_timeout(exc):
            raise ScrapingError("el scraping tardó demasiado (timeout)") from exc
        raise ScrapingError(f"error al descargar la página: {exc}") from exc
    return persons_from_page(page_html, estudio)