import datetime
import io
import struct
import xml.etree.ElementTree as ET
import zipfile
import zlib

import pytest

from certificados.scraping import Person
from certificados.word import (
    CertificateError,
    build_certificate,
    certificate_filename,
    create_word_documents,
    spanish_date,
)

W = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


def _png() -> bytes:
    def chunk(kind: bytes, data: bytes) -> bytes:
        body = kind + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body))

    ihdr = struct.pack(">IIBBBBB", 1, 1, 8, 0, 0, 0, 0)
    idat = zlib.compress(b"\x00\x00")
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", idat) + chunk(b"IEND", b"")


def _document_root(data: bytes):
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return ET.fromstring(archive.read("word/document.xml"))


def _paragraph_texts(data: bytes) -> list[str]:
    root = _document_root(data)
    return ["".join(t.text or "" for t in p.iter(W + "t")) for p in root.iter(W + "p")]


def _person(author="Juan Perez") -> Person:
    return Person(
        author=author,
        uri="http://example.com/handle/123",
        facultad="Facultad de Ingeniería",
        carrera="de la Carrera de Computación",
    )


DATE = datetime.date(2025, 5, 15)


def test_spanish_date_uses_spanish_month_and_padded_day():
    assert spanish_date(datetime.date(2025, 5, 3)) == "03 de mayo de 2025"


@pytest.mark.parametrize("month", range(1, 13))
def test_spanish_date_has_no_english_month(month):
    result = spanish_date(datetime.date(2024, month, 10))
    english = datetime.date(2024, month, 10).strftime("%B")
    assert english not in result
    assert result.startswith("10 de ")
    assert result.endswith(" de 2024")


def test_certificate_filename_replaces_spaces():
    assert certificate_filename("Juan Perez Lopez") == "Juan_Perez_Lopez_certificado.docx"


def test_build_certificate_contains_statement_and_signature():
    data = build_certificate(_person(), "Ana Maria", DATE, _png())
    texts = _paragraph_texts(data)
    statement = next(t for t in texts if t.startswith("El Centro de Documentación"))
    assert "JUAN PEREZ" in statement
    assert "estudiante de la Carrera de Computación, de la Facultad de Ingeniería," in statement
    assert "ANA MARIA" in texts
    assert "Cuenca, " + spanish_date(DATE) in texts
    assert "Link: http://example.com/handle/123" in texts
    assert "CERTIFICADO DE NO ADEUDAR" in texts


def test_build_certificate_header_table():
    data = build_certificate(_person(), "Ana", DATE, _png())
    root = _document_root(data)
    cells = list(root.iter(W + "tc"))
    assert len(cells) == 2
    assert cells[0].find(".//" + W + "drawing") is not None
    header = ["".join(t.text or "" for t in p.iter(W + "t")) for p in cells[1].iter(W + "p")]
    assert header == [
        "FORMATO DE NO ADEUDAR MATERIAL BIBLIOGRÁFICO A LA BIBLIOTECA",
        "UC-CDRJVB-FOR-020",
        "Página 1 de 1",
    ]


def test_title_is_centered_and_bold():
    data = build_certificate(_person(), "Ana", DATE, _png())
    root = _document_root(data)
    for paragraph in root.iter(W + "p"):
        text = "".join(t.text or "" for t in paragraph.iter(W + "t"))
        if text == "CERTIFICADO DE NO ADEUDAR":
            assert paragraph.find(f"{W}pPr/{W}jc").get(W + "val") == "center"
            assert paragraph.find(f".//{W}b") is not None
            assert paragraph.find(f".//{W}sz").get(W + "val") == "24"
            break
    else:
        pytest.fail("title paragraph missing")


def test_logo_is_embedded_unchanged():
    logo = _png()
    data = build_certificate(_person(), "Ana", DATE, logo)
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        assert archive.read("word/media/image1.png") == logo
        assert "[Content_Types].xml" in archive.namelist()


def test_special_characters_are_escaped():
    data = build_certificate(_person("Ana <O'Brien> & Co"), "Ana", DATE, _png())
    statement = next(t for t in _paragraph_texts(data) if t.startswith("El Centro"))
    assert "ANA <O'BRIEN> & CO" in statement


def test_build_certificate_rejects_unknown_image():
    with pytest.raises(CertificateError):
        build_certificate(_person(), "Ana", DATE, b"not an image")


def test_create_word_documents_writes_one_file_per_person(tmp_path):
    logo = tmp_path / "logo.png"
    logo.write_bytes(_png())
    out = tmp_path / "out"
    persons = [_person("Juan Perez"), _person("Maria Lopez")]
    paths = create_word_documents(persons, "Pregrado", "Ana", out, logo, DATE)
    assert [p.name for p in paths] == [
        certificate_filename("Juan Perez"),
        certificate_filename("Maria Lopez"),
    ]
    for path, person in zip(paths, persons):
        texts = _paragraph_texts(path.read_bytes())
        assert any(person.author.upper() in t for t in texts)


def test_create_word_documents_overwrites_existing(tmp_path):
    logo = tmp_path / "logo.png"
    logo.write_bytes(_png())
    target = tmp_path / certificate_filename("Juan Perez")
    target.write_bytes(b"old")
    paths = create_word_documents([_person()], "Pregrado", "Ana", tmp_path, logo, DATE)
    assert paths == [target]
    assert zipfile.is_zipfile(target)


def test_create_word_documents_missing_logo(tmp_path):
    with pytest.raises(CertificateError):
        create_word_documents(
            [_person()], "Pregrado", "Ana", tmp_path / "out", tmp_path / "none.png", DATE
        )


def test_create_word_documents_without_persons_creates_directory(tmp_path):
    out = tmp_path / "nested" / "out"
    paths = create_word_documents([], "Pregrado", "Ana", out, tmp_path / "none.png", DATE)
    assert paths == []
    assert out.is_dir()