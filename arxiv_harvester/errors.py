from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Type


class HarvesterError(Exception):
    """
    Error fatal de configuración/instalación (p.ej. esquemas XSD ausentes).
    El proceso no puede continuar.
    """


class ParseError(Exception):
    """
    La respuesta no es XML bien formado, no valida contra los esquemas,
    tiene una forma no reconocida o algún campo no respeta su formato.
    """


class RepositoryError(Exception):
    """
    Error reportado por el repositorio OAI-PMH (o respuesta de forma no soportada).
    """


class BadArgumentError(RepositoryError):
    """
    El repositorio rechazó los parámetros de la petición (badArgument).
    """


class BadResumptionTokenError(RepositoryError):
    """
    El resumptionToken expiró o no es válido (badResumptionToken).
    Hay que reiniciar la cosecha desde la petición original.
    """


class IllegalArgumentError(ValueError):
    """
    La petición no se puede construir: rango de fechas invertido,
    resumptionToken vacío, identificador vacío...
    """


class TransportError(Exception):
    """
    Fallo de transporte HTTP (conexión, timeout, código de estado no 2xx).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# --- Códigos de error OAI-PMH ---

class ErrorCode(str, Enum):
    BAD_ARGUMENT = "badArgument"
    BAD_RESUMPTION_TOKEN = "badResumptionToken"
    BAD_VERB = "badVerb"
    CANNOT_DISSEMINATE_FORMAT = "cannotDisseminateFormat"
    ID_DOES_NOT_EXIST = "idDoesNotExist"
    NO_METADATA_FORMATS = "noMetadataFormats"
    NO_RECORDS_MATCH = "noRecordsMatch"
    NO_SET_HIERARCHY = "noSetHierarchy"


@dataclass(frozen=True)
class RepositoryErrorReport:
    code: ErrorCode
    message: str


# Menor valor = más grave. Los códigos que no aparecen empatan en _DEFAULT_SEVERITY;
# los de resultado vacío van siempre detrás de cualquier error real.
SEVERITY: Dict[ErrorCode, int] = {
    ErrorCode.BAD_ARGUMENT: 0,
    ErrorCode.BAD_RESUMPTION_TOKEN: 1,
    ErrorCode.ID_DOES_NOT_EXIST: 3,
    ErrorCode.NO_RECORDS_MATCH: 3,
}
_DEFAULT_SEVERITY = 2

# No son errores: consultas válidas sin resultados
EMPTY_RESULT_CODES = frozenset({ErrorCode.ID_DOES_NOT_EXIST, ErrorCode.NO_RECORDS_MATCH})

_ERROR_CLASSES: Dict[ErrorCode, Type[RepositoryError]] = {
    ErrorCode.BAD_ARGUMENT: BadArgumentError,
    ErrorCode.BAD_RESUMPTION_TOKEN: BadResumptionTokenError,
}


def severity_of(code: ErrorCode) -> int:
    return SEVERITY.get(code, _DEFAULT_SEVERITY)


def rank_errors(reports: Iterable[RepositoryErrorReport]) -> List[RepositoryErrorReport]:
    """
    Ordena los errores del más grave al menos grave.
    El orden es estable: a igual severidad se respeta el orden del documento.
    """
    return sorted(reports, key=lambda report: severity_of(report.code))


def error_class_for(code: ErrorCode) -> Type[RepositoryError]:
    """
    Clase de excepción que corresponde a un código de error del repositorio.
    """
    return _ERROR_CLASSES.get(code, RepositoryError)


def format_error_reports(reports: Iterable[RepositoryErrorReport]) -> str:
    lines = ["Error recibido del repositorio:"]
    for report in reports:
        lines.append(f"{report.code.value} : {report.message}")
    return "\n".join(lines)
