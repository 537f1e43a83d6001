"""Generation of "no adeudar" certificates as Word (.docx) documents."""

from __future__ import annotations

import datetime
import io
import logging
import os
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable
from xml.sax.saxutils import escape, quoteattr

from certificados.scraping import Person

log = logging.getLogger(__name__)

MONTHS = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio", "julio",
    "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)

FONT = "Arial"
LOGO_WIDTH_EMU = 6 * 360000  # 6 cm
LOGO_HEIGHT_EMU = int(LOGO_WIDTH_EMU / 3.33)
TABLE_WIDTH = 9000

_W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
_R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
_WP_NS = "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
_A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
_PIC_NS = "http://schemas.openxmlformats.org/drawingml/2006/picture"
_PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
_CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
_OFFICE_DOC_REL = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
)
_IMAGE_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"
_DOC_CT = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"
)
_XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'


class CertificateError(Exception):
    """Raised when a certificate cannot be produced or written."""


def spanish_date(date: datetime.date) -> str:
    """Format a date as e.g. ``05 de marzo de 2025``."""
    return f"{date.day:02d} de {MONTHS[date.month - 1]} de {date.year:04d}"


def certificate_filename(author: str) -> str:
    """Return the file name used for an author's certificate."""
    return f"{author.replace(' ', '_')}_certificado.docx"


@dataclass(frozen=True)
class _ImageKind:
    extension: str
    content_type: str


def _image_kind(data: bytes) -> _ImageKind:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return _ImageKind("png", "image/png")
    if data.startswith(b"\xff\xd8\xff"):
        return _ImageKind("jpeg", "image/jpeg")
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return _ImageKind("gif", "image/gif")
    raise CertificateError("Error al añadir la imagen: formato de imagen no soportado")


def _run(text: str, *, bold: bool = False, size: str | None = None, font: bool = True) -> str:
    props = []
    if font:
        props.append(
            f'<w:rFonts w:ascii="{FONT}" w:hAnsi="{FONT}" w:eastAsia="{FONT}" w:cs="{FONT}"/>'
        )
    if bold:
        props.append("<w:b/>")
    if size is not None:
        props.append(f"<w:sz w:val={quoteattr(size)}/>")
    rpr = f"<w:rPr>{''.join(props)}</w:rPr>" if props else ""
    return f'<w:r>{rpr}<w:t xml:space="preserve">{escape(text)}</w:t></w:r>'


def _paragraph(
    text: str = "",
    *,
    bold: bool = False,
    size: str | None = None,
    jc: str | None = None,
    font: bool = True,
) -> str:
    ppr = f'<w:pPr><w:jc w:val="{jc}"/></w:pPr>' if jc else ""
    return f"<w:p>{ppr}{_run(text, bold=bold, size=size, font=font)}</w:p>"


def _blank(count: int, *, font: bool = True) -> list[str]:
    return [_paragraph(font=font) for _ in range(count)]


def _drawing(rel_id: str, name: str) -> str:
    cx, cy = LOGO_WIDTH_EMU, LOGO_HEIGHT_EMU
    return (
        "<w:p><w:r><w:drawing>"
        '<wp:inline distT="0" distB="0" distL="0" distR="0">'
        f'<wp:extent cx="{cx}" cy="{cy}"/>'
        f'<wp:docPr id="1" name={quoteattr(name)}/>'
        f'<a:graphic xmlns:a="{_A_NS}">'
        f'<a:graphicData uri="{_PIC_NS}">'
        f'<pic:pic xmlns:pic="{_PIC_NS}">'
        f'<pic:nvPicPr><pic:cNvPr id="0" name={quoteattr(name)}/><pic:cNvPicPr/></pic:nvPicPr>'
        f'<pic:blipFill><a:blip r:embed="{rel_id}"/><a:stretch><a:fillRect/></a:stretch></pic:blipFill>'
        '<pic:spPr><a:xfrm><a:off x="0" y="0"/>'
        f'<a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
        '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom></pic:spPr>'
        "</pic:pic></a:graphicData></a:graphic></wp:inline>"
        "</w:drawing></w:r></w:p>"
    )


def _header_table(image_rel: str, image_name: str) -> str:
    half = TABLE_WIDTH // 2
    text_cell = [
        _paragraph(
            "FORMATO DE NO ADEUDAR MATERIAL BIBLIOGRÁFICO A LA BIBLIOTECA",
            bold=True, size="15", jc="end",
        ),
        _paragraph("UC-CDRJVB-FOR-020", size="15", jc="end"),
        _paragraph("Página 1 de 1", size="15", jc="end"),
    ]
    cell_props = f'<w:tcPr><w:tcW w:w="{half}" w:type="dxa"/></w:tcPr>'
    return (
        "<w:tbl>"
        f'<w:tblPr><w:tblW w:w="{TABLE_WIDTH}" w:type="dxa"/></w:tblPr>'
        f'<w:tblGrid><w:gridCol w:w="{half}"/><w:gridCol w:w="{half}"/></w:tblGrid>'
        "<w:tr>"
        f"<w:tc>{cell_props}{_drawing(image_rel, image_name)}</w:tc>"
        f"<w:tc>{cell_props}{''.join(text_cell)}</w:tc>"
        "</w:tr></w:tbl>"
    )


def _body(person: Person, referencista: str, full_date: str, image_rel: str, image_name: str) -> str:
    statement = (
        'El Centro de Documentación Regional "Juan Bautista Vázquez" certifica que '
        f"{person.author.upper()}, portador de la cédula de ciudadanía No. XXXXXXXX, "
        f"estudiante {person.carrera}, de la {person.facultad}, no adeuda ningún bien, "
        "ni material bibliográfico en esta dependencia."
    )
    parts = [_header_table(image_rel, image_name)]
    parts += _blank(5)
    parts.append(_paragraph("CERTIFICADO DE NO ADEUDAR", bold=True, size="24", jc="center"))
    parts += _blank(4)
    parts.append(_paragraph(statement, size="22", jc="both"))
    parts += _blank(3, font=False)
    parts.append(_paragraph(full_date, size="22", jc="end"))
    parts += _blank(3)
    parts.append(_paragraph("Atentamente,", size="22", jc="center"))
    parts += _blank(10)
    parts.append(_paragraph("_" * 40, size="22", jc="center"))
    parts += _blank(1)
    parts.append(_paragraph(referencista.upper(), bold=True, size="22", jc="center"))
    parts.append(_paragraph("Bibliotecario 2", size="22", jc="center"))
    parts.append(_paragraph('CDR "Juan Bautista Vázquez"', size="22", jc="center"))
    parts += _blank(4)
    parts.append(_paragraph(f"Link: {person.uri}", size="22", jc="start"))
    parts += _blank(3)
    parts.append(_paragraph("Version: 2.0", size="15", jc="end"))
    return "".join(parts)


def build_certificate(
    person: Person, referencista: str, date: datetime.date, logo: bytes
) -> bytes:
    """Return the bytes of a .docx certificate for one person."""
    kind = _image_kind(logo)
    image_name = f"image1.{kind.extension}"
    image_rel = "rId1"
    full_date = "Cuenca, " + spanish_date(date)

    document = (
        _XML_DECL
        + f'<w:document xmlns:w="{_W_NS}" xmlns:r="{_R_NS}" xmlns:wp="{_WP_NS}">'
        + f"<w:body>{_body(person, referencista, full_date, image_rel, image_name)}</w:body>"
        + "</w:document>"
    )
    content_types = (
        _XML_DECL
        + f'<Types xmlns="{_CT_NS}">'
        + '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
        + '<Default Extension="xml" ContentType="application/xml"/>'
        + f'<Default Extension="{kind.extension}" ContentType="{kind.content_type}"/>'
        + f'<Override PartName="/word/document.xml" ContentType="{_DOC_CT}"/>'
        + "</Types>"
    )
    package_rels = (
        _XML_DECL
        + f'<Relationships xmlns="{_PKG_REL_NS}">'
        + f'<Relationship Id="rId1" Type="{_OFFICE_DOC_REL}" Target="word/document.xml"/>'
        + "</Relationships>"
    )
    document_rels = (
        _XML_DECL
        + f'<Relationships xmlns="{_PKG_REL_NS}">'
        + f'<Relationship Id="{image_rel}" Type="{_IMAGE_REL}" Target="media/{image_name}"/>'
        + "</Relationships>"
    )

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", content_types)
        archive.writestr("_rels/.rels", package_rels)
        archive.writestr("word/document.xml", document)
        archive.writestr("word/_rels/document.xml.rels", document_rels)
        archive.writestr(f"word/media/{image_name}", logo)
    return buffer.getvalue()


def create_word_documents(
    persons: Iterable[Person],
    estudio: str,
    referencista: str,
    output_dir: str | os.PathLike[str] = "certificados",
    logo_path: str | os.PathLike[str] = "logoucuenca.png",
    today: datetime.date | None = None,
) -> list[Path]:
    """Write one certificate per person into ``output_dir``; return the paths.

    ``estudio`` is accepted for symmetry with the other workflows; the
    study level is already part of each person's ``carrera``.
    """
    directory = Path(output_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CertificateError(
            f"error al crear el directorio de certificados: {exc}"
        ) from exc

    date = today or datetime.date.today()
    logo: bytes | None = None
    written: list[Path] = []
    for person in persons:
        if logo is None:
            try:
                logo = Path(logo_path).read_bytes()
            except OSError as exc:
                raise CertificateError(f"Error al añadir la imagen: {exc}") from exc
        data = build_certificate(person, referencista, date, logo)
        target = directory / certificate_filename(person.author)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise CertificateError(
                f"no se pudo eliminar el archivo existente para {person.author}: {exc}"
            ) from exc
        try:
            target.write_bytes(data)
        except OSError as exc:
            raise CertificateError(
                f"error al escribir en el archivo para {person.author}: {exc}"
            ) from exc
        log.info("Documento creado exitosamente para: %s", person.author)
        written.append(target)
    return written