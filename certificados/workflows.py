"""Certificate workflows: thesis, comprehensive exam, bulk, search and export."""

from __future__ import annotations

import csv
import datetime
import os
import re
from pathlib import Path
from typing import Callable, Iterable

from certificados.database import Database, Registro
from certificados.scraping import Person, scrape
from certificados.word import create_word_documents

BIBLIOTECARIOS = (
    "PAOLA DEL ROCIO AMAYA ARCE",
    "DIANA ALEXANDRA LEON BRAVO",
    "FRANCISCO TEODORO ASTUDILLO SAQUINAULA",
    "DIANA MARLENE FAJARDO PASÁN",
    "WILMAN GONZALO TANDAZO GUEVARA",
    "LOURDES GABRIELA ORELLANA GUERRA",
    "JESSICA ELIZABETH BERMEO SOTAMBA",
    "ERIKA SOFIA PEÑAFIEL VAZQUEZ",
    "NUBE DEL ROCIO SALTO MORQUECHO",
    "HECTOR BLADIMIR CABRERA RODRIGUEZ",
    "JUAN PABLO CRIOLLO SAQUICARAY",
    "VANESSA ALEXANDRA MORALES MARIÑO",
    "DANIEL RAMIRO CARRIÓN ROMÁN",
    "DORIS PATRICIA TENESACA CARDENAS",
)
DEFAULT_REFERENCISTA = BIBLIOTECARIOS[0]

ESTUDIOS = ("Pregrado", "Posgrado")
DEFAULT_FACULTAD = "Facultad de Ciencias Médicas"
COMPLEXIVO_HANDLE = "Exámen Complexivo"
EXPORT_HEADER = ("Autor", "Handle", "Facultad", "Carrera", "Fecha", "Bibliotecario")

FACULTAD_CARRERAS: dict[str, tuple[str, ...]] = {
    "Facultad de Ciencias Agropecuarias": ("Medicina Veterinaria", "Agronomía"),
    "Facultad de Arquitectura": ("Arquitectura",),
    "Facultad de Artes": (
        "Artes Visuales",
        "Artes Escénicas",
        "Artes Musicales",
        "Diseño de Interirores",
        "Diseño Gráfico",
    ),
    "Facultad de Ciencias Ecnómicas y Administrativas": (
        "Administración de Empresas",
        "Contabilida y Auditoría",
        "Economía",
        "Mercadotecnia",
        "Sociología",
        "Emprendimiento e Innovación",
    ),
    "Facultad de Ciencias Médicas": (
        "Medicina",
        "Enfermería",
        "Fonoaudiología",
        "Fisioterapia",
        "Laboratorio Clínico",
        "Nutrición y Dietética",
        "Imagenología y Radiología",
        "Estimulación Temprana en Salud",
    ),
    "Facultad de Psicología": ("Psicología", "Psicología Educativa"),
    "Facultad de Ciencias Químicas": (
        "Ingeniería Ambiental",
        "Bioquímica y Farmacia",
        "Ingeniería Química",
        "Ingeniería Industrial",
    ),
    "Facultad de Odontología": ("Odontología",),
    "Facultad de Jurisprudencia y Ciencias Políticas y Sociales": (
        "Derecho",
        "Trabajo Social",
        "Género y Desarrollo",
        "Orientación Familiar",
    ),
    "Facultad de Ingeniería": (
        "Computación",
        "Telecomunicaciones",
        "Electricidad",
        "Ingeniería Civil",
    ),
    "Facultad de Ciencias de la Hospitalidad": (
        "Gastronomía",
        "Turismo",
        "Hospitalidad y Hotelería",
    ),
    "Facultad de Filosofía, Letras y Ciencias de la Educación": (
        "Cine",
        "Educación Básica",
        "Pedagogía de la Lengua y la Literatura",
        "Pedagogía de la Historia y las Ciencias Sociales",
        "Pedagogía de las Artes y Humanidades",
        "Pedagogía de las Ciencias Experimentales: Matemática y Física",
        "Pedagogía de lso Idiomas Nacionales y Extranjeros",
        "Educación Inicial",
        "Pedagogía de la Actividad Física y el Deporte",
        "Comunicación",
        "Periodismo",
        "Pedagogía de las Ciencias Experimentales: Química y Biología",
    ),
}

_DSPACE_URL = re.compile(r"https://dspace\.ucuenca\.edu\.ec/items/[a-f0-9\-]{36}")
_DSPACE_URL_ERROR = (
    "La URL debe tener el formato:\n"
    "https://dspace.ucuenca.edu.ec/items/ae74c58d-13d2-4049-bc63-56b41bf6d478"
)


class ValidationError(Exception):
    """Raised when user input for a workflow is missing or malformed."""


def validate_dspace_url(url: str) -> str:
    """Return ``url`` if it is a repository item URL, else raise ValidationError."""
    if _DSPACE_URL.fullmatch(url) is None:
        raise ValidationError(_DSPACE_URL_ERROR)
    return url


def is_valid_export_date(fecha: str) -> bool:
    """Tell whether ``fecha`` has the shape YYYY, YYYY-MM or YYYY-MM-DD."""
    if len(fecha) == 4:
        return True
    if len(fecha) == 7:
        return fecha[4] == "-"
    if len(fecha) == 10:
        return fecha[4] == "-" and fecha[7] == "-"
    return False


def resolve_estudio(estudio: str, posgrado: str = "") -> str:
    """Return the study name: the postgraduate name when ``estudio`` is Posgrado."""
    if estudio == "Posgrado":
        if not posgrado:
            raise ValidationError("El campo de posgrado no puede estar vacío")
        return posgrado
    return estudio


def carreras_for(facultad: str) -> list[str]:
    """Return the careers of a faculty, or an empty list for an unknown one."""
    return list(FACULTAD_CARRERAS.get(facultad, ()))


def read_masivos_csv(
    path: str | os.PathLike[str], facultad: str, carrera: str
) -> list[Person]:
    """Read student names from the first column of a CSV file with a header row."""
    try:
        with open(path, newline="", encoding="utf-8") as handle:
            rows = [row for row in csv.reader(handle) if row]
    except OSError as exc:
        raise ValidationError(f"Error al abrir el archivo: {exc}") from exc
    except (csv.Error, UnicodeDecodeError) as exc:
        raise ValidationError(f"Error al leer el archivo CSV: {exc}") from exc

    if rows:
        expected = len(rows[0])
        for number, row in enumerate(rows, start=1):
            if len(row) != expected:
                raise ValidationError(
                    f"Error al leer el archivo CSV: record {number}: "
                    "wrong number of fields"
                )

    persons = []
    for number, row in enumerate(rows[1:], start=2):
        if not row or not row[0]:
            raise ValidationError(f"La fila {number} no tiene un nombre válido")
        persons.append(Person(author=row[0], uri="", facultad=facultad, carrera=carrera))
    return persons


def _write_csv(target: Path, registros: Iterable[Registro]) -> None:
    with open(target, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for registro in registros:
            writer.writerow(
                (
                    registro.author,
                    registro.handle,
                    registro.facultad,
                    registro.carrera,
                    registro.fecha,
                    registro.bibliotecario,
                )
            )


def export_by_date(
    db: Database, fecha: str, directory: str | os.PathLike[str] = "."
) -> Path:
    """Write the records whose date contains ``fecha`` to ``export_<fecha>.csv``."""
    if not fecha:
        raise ValidationError("Por favor, introduce una fecha para exportar")
    if not is_valid_export_date(fecha):
        raise ValidationError(
            "Formato de fecha no válido. Usa YYYY, YYYY-MM o YYYY-MM-DD"
        )
    registros = db.fetch_by_query(fecha, "fecha")
    target = Path(directory) / f"export_{fecha}.csv"
    try:
        _write_csv(target, registros)
    except OSError as exc:
        raise ValidationError(f"Error al crear el archivo CSV: {exc}") from exc
    return target


def _today() -> str:
    return datetime.date.today().isoformat()


class CertificateService:
    """Issues certificates and records each one in the database."""

    def __init__(
        self,
        db: Database,
        output_dir: str | os.PathLike[str] = "certificados",
        logo_path: str | os.PathLike[str] = "logoucuenca.png",
        fetch: Callable[[str, str], list[Person]] = scrape,
    ) -> None:
        self.db = db
        self.output_dir = output_dir
        self.logo_path = logo_path
        self.fetch = fetch

    def _issue(self, persons: list[Person], estudio: str, referencista: str) -> list[Path]:
        paths = create_word_documents(
            persons, estudio, referencista, self.output_dir, self.logo_path
        )
        fecha = _today()
        for person in persons:
            self.db.add_registro(
                Registro(
                    author=person.author,
                    handle=person.uri,
                    facultad=person.facultad,
                    carrera=person.carrera,
                    fecha=fecha,
                    bibliotecario=referencista,
                )
            )
        return paths

    @staticmethod
    def _check_affiliation(facultad: str, carrera: str) -> None:
        if not facultad:
            raise ValidationError("Por favor, selecciona una facultad")
        if not carrera:
            raise ValidationError("Por favor, selecciona una carrera")

    def tesis(
        self,
        url: str,
        estudio: str = "Pregrado",
        posgrado: str = "",
        referencista: str = DEFAULT_REFERENCISTA,
    ) -> list[Path]:
        """Issue certificates for every author of a thesis in the repository."""
        validate_dspace_url(url)
        estudio = resolve_estudio(estudio, posgrado)
        persons = self.fetch(url, estudio)
        return self._issue(persons, estudio, referencista)

    def complexivo(
        self,
        name: str,
        estudio: str = "Pregrado",
        posgrado: str = "",
        referencista: str = DEFAULT_REFERENCISTA,
        facultad: str = DEFAULT_FACULTAD,
        carrera: str = "",
    ) -> list[Path]:
        """Issue a certificate for a student who passed the comprehensive exam."""
        if not name:
            raise ValidationError("El nombre del estudiante no puede estar vacío")
        self._check_affiliation(facultad, carrera)
        estudio = resolve_estudio(estudio, posgrado)
        person = Person(
            author=name,
            uri=COMPLEXIVO_HANDLE,
            facultad=facultad,
            carrera=f"de la carrera de {carrera}",
        )
        return self._issue([person], estudio, referencista)

    def masivos(
        self,
        path: str | os.PathLike[str],
        estudio: str = "Pregrado",
        posgrado: str = "",
        referencista: str = DEFAULT_REFERENCISTA,
        facultad: str = DEFAULT_FACULTAD,
        carrera: str = "",
    ) -> list[Path]:
        """Issue certificates for every student listed in a CSV file."""
        if not path:
            raise ValidationError("Por favor, selecciona un archivo CSV")
        self._check_affiliation(facultad, carrera)
        estudio = resolve_estudio(estudio, posgrado)
        persons = read_masivos_csv(path, facultad, f"de la carrera de {carrera}")
        return self._issue(persons, estudio, referencista)

    def search(self, handle: str) -> list[Registro]:
        """Return the recorded certificates whose handle contains ``handle``."""
        if not handle:
            raise ValidationError("Por favor, introduce un handle para buscar")
        return self.db.fetch_by_query(handle, "handle")

    def reissue(self, registro: Registro | None) -> list[Path]:
        """Issue again the certificate of a stored record and record it anew."""
        if registro is None:
            raise ValidationError(
                "Por favor, selecciona una fila para crear el certificado"
            )
        person = Person(
            author=registro.author,
            uri=registro.handle,
            facultad=registro.facultad,
            carrera=registro.carrera,
        )
        paths = create_word_documents(
            [person],
            registro.facultad,
            registro.bibliotecario,
            self.output_dir,
            self.logo_path,
        )
        self.db.add_registro(registro)
        return paths