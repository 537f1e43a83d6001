import socket
import urllib.error
from unittest import mock

import pytest

from certificados.scraping import (
    Person,
    ScrapingError,
    parse_breadcrumb,
    parse_table,
    persons_from_page,
    scrape,
)

TBODY = """<tbody>
<tr><td>dc.contributor.author</td><td> Perez Lopez, Ana </td><td>es_ES</td></tr>
<tr><td>dc.contributor.author</td><td>Vega Ruiz, Luis</td><td></td></tr>
<tr><td>dc.identifier.uri</td><td>http://dspace.example.com/handle/123456789/40001</td></tr>
<tr><td>dc.title</td><td>Un estudio</td></tr>
</tbody>"""

BREADCRUMB = """<ol class="container breadcrumb my-0">
<li><a href="/">Inicio</a></li>
<li><a href="/c1">Facultad de Ingeniería</a></li>
<li><a href="/c2"> Computación </a></li>
<li><a href="/i">Un estudio</a></li>
</ol>"""

URI = "http://dspace.example.com/handle/123456789/40001"


def _page(tbody=TBODY, breadcrumb=BREADCRUMB):
    return f"<html><body><nav>{breadcrumb}</nav><table>{tbody}</table></body></html>"


def test_parse_table_collects_authors_with_uri():
    persons = parse_table(TBODY, "F", "C")
    assert persons == [
        Person("Perez Lopez, Ana", URI, "F", "C"),
        Person("Vega Ruiz, Luis", URI, "F", "C"),
    ]


def test_parse_table_cell_starting_with_tag_is_empty():
    html = "<tbody><tr><td>dc.contributor.author</td><td><span>x</span></td></tr></tbody>"
    assert [p.author for p in parse_table(html, "", "")] == [""]


def test_parse_table_without_authors():
    assert parse_table("<tbody><tr><td>dc.title</td><td>T</td></tr></tbody>", "", "") == []


def test_parse_breadcrumb_picks_third_and_second_last():
    assert parse_breadcrumb(BREADCRUMB) == ("Facultad de Ingeniería", "Computación")


def test_parse_breadcrumb_too_few_links():
    assert parse_breadcrumb('<ol><li><a href="/">Inicio</a></li></ol>') == ("", "")


def test_persons_from_page_pregrado():
    persons = persons_from_page(_page(), "Pregrado")
    assert [p.author for p in persons] == ["Perez Lopez, Ana", "Vega Ruiz, Luis"]
    assert all(p.carrera == "de la Carrera de Computación" for p in persons)
    assert all(p.facultad == "Facultad de Ingeniería" for p in persons)
    assert all(p.uri == URI for p in persons)


def test_persons_from_page_posgrado():
    persons = persons_from_page(_page(), "Gestión Ambiental")
    assert {p.carrera for p in persons} == {"de la Maestría de Gestión Ambiental"}


def test_missing_tbody():
    with pytest.raises(ScrapingError, match="<tbody>"):
        persons_from_page("<html><body>" + BREADCRUMB + "</body></html>", "Pregrado")


def test_missing_breadcrumb():
    with pytest.raises(ScrapingError, match="breadcrumb"):
        persons_from_page(_page(breadcrumb="<ol class='breadcrumb'></ol>"), "Pregrado")


def test_no_persons():
    tbody = "<tbody><tr><td>dc.title</td><td>T</td></tr></tbody>"
    with pytest.raises(ScrapingError, match="no se encontraron personas"):
        persons_from_page(_page(tbody=tbody), "Pregrado")


def _response(body: bytes):
    cm = mock.MagicMock()
    cm.__enter__.return_value.read.return_value = body
    cm.__enter__.return_value.headers.get_content_charset.return_value = "utf-8"
    return cm


def test_scrape_fetches_full_view():
    with mock.patch("urllib.request.urlopen", return_value=_response(_page().encode())) as urlopen:
        persons = scrape("https://dspace.example.com/items/abc", "Pregrado", timeout=5)
    assert urlopen.call_args.args[0] == "https://dspace.example.com/items/abc/full"
    assert len(persons) == 2


def test_scrape_timeout():
    with mock.patch("urllib.request.urlopen", side_effect=socket.timeout("t")):
        with pytest.raises(ScrapingError, match="timeout"):
            scrape("https://dspace.example.com/items/abc", "Pregrado")


def test_scrape_network_error():
    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
        with pytest.raises(ScrapingError, match="down"):
            scrape("https://dspace.example.com/items/abc", "Pregrado")