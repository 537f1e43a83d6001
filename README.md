# certificados

Generates "no adeudar material bibliográfico" certificates. Each student gets
one Word document (`.docx`) stating that they owe the library no books or
other material. Every certificate issued is recorded in a local SQLite
register. The register can be searched and exported to CSV.

Certificates can be issued in three ways:

- **tesis**: from the URL of a thesis item in the institutional DSpace
  repository (`https://dspace.ucuenca.edu.ec/items/<36-character id>`). The
  program downloads the item's full record page (`<url>/full`). It reads the
  authors from its metadata table and the faculty and degree programme from
  its breadcrumb.
- **complexivo**: for one student who passed the comprehensive exam. You
  give the name, the faculty and the degree programme.
- **masivos**: for every student listed in a CSV file. The file is read as
  UTF-8. The first row is a header. The name is taken from the first column
  of each row after it. Blank lines are skipped. Every row must have the same
  number of fields.

Only the standard library is needed at run time.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
certificados --help
```

General options, given before the command:

- `--db FILE`: register database. The default is `registro.db`.
- `--output-dir DIR`: where certificates are written. The default is
  `certificados`. The directory is created if missing, and an existing
  certificate with the same name is replaced.
- `--logo FILE`: header image, in PNG, JPEG or GIF format. The default is
  `logoucuenca.png` in the current directory.

Commands:

```
certificados tesis URL [--estudio Pregrado|Posgrado] [--posgrado NOMBRE] [--referencista NOMBRE]
certificados complexivo NOMBRE --carrera CARRERA [--facultad FACULTAD] [study options]
certificados masivos ARCHIVO.csv --carrera CARRERA [--facultad FACULTAD] [study options]
certificados buscar HANDLE [--reemitir N]
certificados exportar FECHA [--directorio DIR]
certificados facultades [FACULTAD]
```

- `--estudio Posgrado` requires `--posgrado` with the name of the
  postgraduate programme.
- `--referencista` must be one of the librarians known to the program. The
  default is the first one in that list.
- `--facultad` defaults to "Facultad de Ciencias Médicas". `--carrera` must
  be one of that faculty's programmes. `certificados facultades` lists all
  faculties and their programmes.
- `buscar` prints a numbered, tab-separated table of the records whose handle
  contains `HANDLE`. With `--reemitir N`, it writes the certificate for row N
  again and adds that record to the register once more.
- `exportar` accepts `YYYY`, `YYYY-MM` or `YYYY-MM-DD`. It writes every
  record whose date contains that text to `export_<fecha>.csv`.

On error, the command prints `Ocurrió un error:` and the reason to standard
error, then exits with status 1.

## Library use

```python
from certificados.database import Database
from certificados.workflows import CertificateService, export_by_date

with Database("registro.db") as db:
    service = CertificateService(db, output_dir="certificados", logo_path="logoucuenca.png")
    service.complexivo(
        "Ana Pérez",
        facultad="Facultad de Ingeniería",
        carrera="Computación",
    )
    for registro in service.search("Complexivo"):
        print(registro.author, registro.fecha)
    export_by_date(db, "2025-05", ".")
```

Modules:

- `certificados.database`: `Database`, which is also a context manager. It
  creates the `registro` table if needed. `add_registro` adds an entry and
  returns its row id. `fetch_by_query(q, column)` runs a substring search on
  one of the columns `author`, `handle`, `facultad`, `carrera`, `fecha` or
  `bibliotecario`. The module also defines `Registro` and `DatabaseError`.
- `certificados.scraping`: `parse_breadcrumb`, `parse_table`,
  `persons_from_page` and `scrape`. Together they turn an item page into
  `Person` records. Failures raise `ScrapingError`.
- `certificados.word`: `build_certificate` returns the bytes of one `.docx`
  file. `create_word_documents` writes one file per person, named by
  `certificate_filename`, and returns the paths. `spanish_date` formats the
  date line, for example "Cuenca, 15 de mayo de 2025". Failures raise
  `CertificateError`.
- `certificados.workflows`:
  - validation helpers: `validate_dspace_url`, `is_valid_export_date`,
    `resolve_estudio`, `carreras_for` and `read_masivos_csv`;
  - CSV export: `export_by_date`;
  - `CertificateService`, which provides `tesis`, `complexivo`, `masivos`,
    `search` and `reissue`. Every certificate it issues is recorded with
    today's date. The `fetch` argument replaces the page download used by
    `tesis`.

  Bad input raises `ValidationError`.
- `certificados.cli`: `build_parser` and `main`, the `certificados` command.

## What it does not do

- There is no graphical interface. Everything is done from the command line
  or from Python.
- `scrape` downloads the item page with a plain HTTP request and does not run
  scripts. If the repository builds the metadata table or breadcrumb in the
  browser, the downloaded page may lack them. In that case `tesis` fails with
  a `ScrapingError`. You can then pass your own `fetch` to
  `CertificateService`, or give already downloaded HTML to
  `persons_from_page`.
- The certificate text leaves the identity card number as `XXXXXXXX`, to be
  filled in by hand.