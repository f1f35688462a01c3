"""
Conversores de campos de la respuesta de arXiv.

Los datos de arXiv traen saltos de línea espurios en medio de muchos valores
de texto, así que todo string extraído pasa por normalize_space().
"""

import re
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional

from arxiv_harvester.errors import ParseError

_WHITESPACE_RE = re.compile(r"\s+")
_DATESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# RFC 1123: "Fri, 8 Feb 2013 21:00:01 GMT" (día de la semana opcional)
_RFC1123_RE = re.compile(
    r"^(?:(?P<weekday>[A-Z][a-z]{2}), )?\d{1,2} [A-Z][a-z]{2} \d{4} \d{2}:\d{2}(?::\d{2})? "
    r"(?:GMT|UT|Z|[+-]\d{4})$"
)
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def normalize_space(value: Optional[str]) -> Optional[str]:
    """
    Colapsa cualquier secuencia de espacios (incluidos saltos de línea)
    en un único espacio y recorta los extremos. None -> None.
    """
    if value is None:
        return None
    return _WHITESPACE_RE.sub(" ", value).strip()


def parse_datestamp(value: Optional[str]) -> date:
    """
    Datestamp de la cabecera OAI en formato YYYY-MM-DD.
    """
    if value is None or not _DATESTAMP_RE.match(value):
        raise ParseError(f"No se pudo interpretar el datestamp '{value}' (formato YYYY-MM-DD)")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ParseError(
            f"No se pudo interpretar el datestamp '{value}' (formato YYYY-MM-DD)"
        ) from e


def parse_version_number(value: Optional[str]) -> int:
    """
    Número de versión a partir de la etiqueta "v1", "v2", ...
    """
    error = f"No se pudo interpretar la versión '{value}'"
    if value is None or not value.startswith("v"):
        raise ParseError(error)

    digits = value[1:]
    # isdigit() acepta dígitos no ASCII; exigimos 0-9
    if not digits or not digits.isascii() or not digits.isdigit():
        raise ParseError(error)

    number = int(digits)
    if number <= 0:
        raise ParseError(error)
    return number


def parse_submission_time(value: Optional[str]) -> datetime:
    """
    Fecha de una versión en formato RFC 1123, p.ej. "Fri, 8 Feb 2013 21:00:01 GMT".
    Se devuelve en UTC.
    """
    error = f"No se pudo interpretar la fecha de versión '{value}' (formato RFC 1123)"
    match = _RFC1123_RE.match(value) if value is not None else None
    if match is None:
        raise ParseError(error)
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError) as e:
        raise ParseError(error) from e

    # El día de la semana, si viene, se comprueba en la zona horaria original
    weekday = match.group("weekday")
    if weekday is not None and weekday != _WEEKDAYS[parsed.weekday()]:
        raise ParseError(f"{error}: {weekday} no corresponde a esa fecha")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_response_date(value: Optional[str]) -> datetime:
    """
    responseDate del sobre OAI-PMH (xs:dateTime), convertido a UTC.
    """
    if not value:
        raise ParseError("La respuesta no tiene responseDate")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ParseError(f"No se pudo interpretar responseDate '{value}'") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_categories(value: Optional[str]) -> List[str]:
    """
    Separa la cadena de categorías ("quant-ph cond-mat.other") respetando el orden.
    """
    value = normalize_space(value)
    if not value:
        return []
    return value.split(" ")


def parse_optional_int(value: Optional[str]) -> Optional[int]:
    """
    Entero de un atributo opcional (cursor, completeListSize).
    Si falta o no es numérico se devuelve None.
    """
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None
