"""SQLite storage for issued certificate records."""

from __future__ import annotations

import os
import sqlite3
from dataclasses import astuple, dataclass

COLUMNS = ("author", "handle", "facultad", "carrera", "fecha", "bibliotecario")

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS registro (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    author TEXT NOT NULL,
    handle TEXT NOT NULL,
    facultad TEXT NOT NULL,
    carrera TEXT NOT NULL,
    fecha TEXT NOT NULL,
    bibliotecario TEXT NOT NULL
)
"""


class DatabaseError(Exception):
    """Raised when the record store cannot complete an operation."""


@dataclass
class Registro:
    """One issued certificate."""

    author: str
    handle: str
    facultad: str
    carrera: str
    fecha: str
    bibliotecario: str


class Database:
    """A record store backed by an SQLite file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        try:
            self._conn: sqlite3.Connection | None = sqlite3.connect(os.fspath(path))
        except sqlite3.Error as exc:
            raise DatabaseError(f"error al abrir la base de datos: {exc}") from exc
        try:
            with self._conn:
                self._conn.execute(_CREATE_TABLE)
        except sqlite3.Error as exc:
            self.close()
            raise DatabaseError(f"error al crear la tabla: {exc}") from exc

    def close(self) -> None:
        """Close the underlying connection; further use raises DatabaseError."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DatabaseError("la base de datos no está inicializada")
        return self._conn

    def add_registro(self, registro: Registro) -> int:
        """Insert a record and return its row id."""
        conn = self._connection
        try:
            with conn:
                cursor = conn.execute(
                    "INSERT INTO registro (author, handle, facultad, carrera, fecha, "
                    "bibliotecario) VALUES (?,?,?,?,?,?)",
                    astuple(registro),
                )
        except sqlite3.Error as exc:
            raise DatabaseError(f"error al insertar el registro: {exc}") from exc
        if cursor.lastrowid is None:
            raise DatabaseError(
                "error al obtener el ID del último registro insertado"
            )
        return cursor.lastrowid

    def fetch_by_query(self, q: str, column: str) -> list[Registro]:
        """Return the records whose ``column`` contains ``q``."""
        conn = self._connection
        if column not in COLUMNS:
            raise DatabaseError(f"columna no válida: {column}")
        sql = (
            f"SELECT {', '.join(COLUMNS)} FROM registro WHERE {column} LIKE ?"
        )
        try:
            rows = conn.execute(sql, (f"%{q}%",)).fetchall()
        except sqlite3.Error as exc:
            raise DatabaseError(f"error al ejecutar la consulta: {exc}") from exc
        return [Registro(*row) for row in rows]