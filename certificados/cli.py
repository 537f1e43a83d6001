"""Command-line front end for issuing and managing certificates."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from certificados.database import Database, DatabaseError, Registro
from certificados.scraping import ScrapingError
from certificados.word import CertificateError
from certificados.workflows import (
    BIBLIOTECARIOS,
    DEFAULT_FACULTAD,
    DEFAULT_REFERENCISTA,
    ESTUDIOS,
    EXPORT_HEADER,
    FACULTAD_CARRERAS,
    CertificateService,
    ValidationError,
    carreras_for,
    export_by_date,
)

_ERRORS = (ValidationError, DatabaseError, ScrapingError, CertificateError)

_SUCCESS_ONE = (
    "El certificado se generó correctamente y se guardó en la base de datos."
)
_SUCCESS_MANY = (
    "Los certificados se generaron correctamente y se guardaron en la base de datos."
)
_SUCCESS_REISSUE = (
    "El certificado se generó correctamente y se agregó a la base de datos."
)


def _study_options() -> argparse.ArgumentParser:
    options = argparse.ArgumentParser(add_help=False)
    options.add_argument(
        "--estudio", choices=ESTUDIOS, default="Pregrado",
        help="tipo de estudio (por defecto: Pregrado)",
    )
    options.add_argument(
        "--posgrado", default="",
        help="nombre del posgrado, obligatorio con --estudio Posgrado",
    )
    options.add_argument(
        "--referencista", choices=BIBLIOTECARIOS, default=DEFAULT_REFERENCISTA,
        metavar="NOMBRE", help="bibliotecario que firma el certificado",
    )
    return options


def _affiliation_options() -> argparse.ArgumentParser:
    options = argparse.ArgumentParser(add_help=False)
    options.add_argument(
        "--facultad", choices=tuple(FACULTAD_CARRERAS), default=DEFAULT_FACULTAD,
        metavar="FACULTAD", help=f"facultad (por defecto: {DEFAULT_FACULTAD})",
    )
    options.add_argument(
        "--carrera", required=True, help="carrera dentro de la facultad elegida",
    )
    return options


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser of the ``certificados`` command."""
    parser = argparse.ArgumentParser(
        prog="certificados",
        description=(
            "Genera certificados de no adeudar material bibliográfico a la "
            "biblioteca y lleva su registro."
        ),
    )
    parser.add_argument("--db", default="registro.db", help="archivo de la base de datos")
    parser.add_argument(
        "--output-dir", default="certificados",
        help="directorio donde se guardan los certificados",
    )
    parser.add_argument(
        "--logo", default="logoucuenca.png", help="imagen del encabezado",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    study = _study_options()
    affiliation = _affiliation_options()

    tesis = sub.add_parser(
        "tesis", parents=[study],
        help="certificados para los autores de un trabajo de titulación",
    )
    tesis.add_argument("url", help="URL del trabajo de titulación en el repositorio")

    complexivo = sub.add_parser(
        "complexivo", parents=[study, affiliation],
        help="certificado para un estudiante de examen complexivo",
    )
    complexivo.add_argument("nombre", help="nombre del estudiante")

    masivos = sub.add_parser(
        "masivos", parents=[study, affiliation],
        help="certificados para los estudiantes de un archivo CSV",
    )
    masivos.add_argument("archivo", help="archivo CSV con los nombres en la primera columna")

    buscar = sub.add_parser("buscar", help="busca certificados por handle")
    buscar.add_argument("handle", help="handle o parte de él, ejemplo: 15489")
    buscar.add_argument(
        "--reemitir", type=int, metavar="N",
        help="vuelve a generar el certificado de la fila N del resultado",
    )

    exportar = sub.add_parser("exportar", help="exporta registros por fecha a CSV")
    exportar.add_argument("fecha", help="YYYY, YYYY-MM o YYYY-MM-DD")
    exportar.add_argument(
        "--directorio", default=".", help="directorio del archivo exportado",
    )

    facultades = sub.add_parser("facultades", help="lista facultades y carreras")
    facultades.add_argument("facultad", nargs="?", help="muestra solo sus carreras")
    return parser


def _check_carrera(facultad: str, carrera: str) -> None:
    if carrera not in carreras_for(facultad):
        raise ValidationError(
            f"La carrera {carrera!r} no pertenece a la {facultad}"
        )


def _report(paths: Sequence[Path], message: str) -> None:
    for path in paths:
        print(path)
    print(message)


def _print_registros(registros: Sequence[Registro]) -> None:
    print("\t".join(("#",) + EXPORT_HEADER))
    for number, registro in enumerate(registros, start=1):
        print(
            "\t".join(
                (
                    str(number),
                    registro.author,
                    registro.handle,
                    registro.facultad,
                    registro.carrera,
                    registro.fecha,
                    registro.bibliotecario,
                )
            )
        )


def _list_facultades(facultad: str | None) -> None:
    if facultad is not None:
        if facultad not in FACULTAD_CARRERAS:
            raise ValidationError(f"Facultad desconocida: {facultad}")
        for carrera in carreras_for(facultad):
            print(carrera)
        return
    for name, carreras in FACULTAD_CARRERAS.items():
        print(name)
        for carrera in carreras:
            print(f"  {carrera}")


def _run(args: argparse.Namespace) -> None:
    if args.command == "facultades":
        _list_facultades(args.facultad)
        return

    with Database(args.db) as db:
        service = CertificateService(db, args.output_dir, args.logo)
        if args.command == "tesis":
            paths = service.tesis(args.url, args.estudio, args.posgrado, args.referencista)
            _report(paths, _SUCCESS_MANY if len(paths) > 1 else _SUCCESS_ONE)
        elif args.command == "complexivo":
            _check_carrera(args.facultad, args.carrera)
            paths = service.complexivo(
                args.nombre, args.estudio, args.posgrado, args.referencista,
                args.facultad, args.carrera,
            )
            _report(paths, _SUCCESS_ONE)
        elif args.command == "masivos":
            _check_carrera(args.facultad, args.carrera)
            paths = service.masivos(
                args.archivo, args.estudio, args.posgrado, args.referencista,
                args.facultad, args.carrera,
            )
            _report(paths, _SUCCESS_MANY)
        elif args.command == "buscar":
            registros = service.search(args.handle)
            _print_registros(registros)
            if args.reemitir is not None:
                index = args.reemitir - 1
                selected = registros[index] if 0 <= index < len(registros) else None
                _report(service.reissue(selected), _SUCCESS_REISSUE)
        elif args.command == "exportar":
            target = export_by_date(db, args.fecha, args.directorio)
            print(f"Datos exportados correctamente a {target.name}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command and return its exit status."""
    args = build_parser().parse_args(argv)
    try:
        _run(args)
    except _ERRORS as exc:
        print(f"Ocurrió un error:\n\n{exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())