import logging
from datetime import datetime
from typing import BinaryIO, List, Optional, Union

from lxml import etree as ET
from pydantic import ValidationError

from arxiv_harvester.errors import (
    EMPTY_RESULT_CODES,
    ErrorCode,
    ParseError,
    RepositoryError,
    RepositoryErrorReport,
    error_class_for,
    format_error_reports,
    rank_errors,
)
from arxiv_harvester.models.article import ArticleMetadata, ArticleVersion, ParsedResponse
from arxiv_harvester.services.normalizers import (
    normalize_space,
    parse_categories,
    parse_datestamp,
    parse_optional_int,
    parse_response_date,
    parse_submission_time,
    parse_version_number,
)
from arxiv_harvester.services.schema_validator import (
    NS_ARXIV_RAW,
    NS_OAI,
    SchemaValidator,
    get_default_validator,
)

logger = logging.getLogger(__name__)

ns = {
    "oai": NS_OAI,
    "arXivRaw": NS_ARXIV_RAW,
}


def _text(el: ET._Element, path: str) -> Optional[str]:
    return normalize_space(el.findtext(path, namespaces=ns))


class ResponseParser:
    """
    Convierte la respuesta XML del repositorio OAI de arXiv en un ParsedResponse.

    La respuesta debe:
    - validar contra el esquema OAI-PMH 2.0,
    - ser una respuesta GetRecord o ListRecords (o un informe de errores),
    - traer metadatos en formato arXivRaw (revisión 2014-06-24).

    Los valores de texto se normalizan porque arXiv devuelve saltos de línea
    espurios dentro de muchos campos.
    """

    def __init__(self, validator: Optional[SchemaValidator] = None):
        self.validator = validator or get_default_validator()

    def parse(self, xml_response: Union[bytes, BinaryIO]) -> ParsedResponse:
        """
        Lanza:
        - ParseError si el XML no se puede parsear o validar,
        - BadArgumentError / BadResumptionTokenError / RepositoryError si el
          repositorio devolvió errores,
        - RepositoryError si la respuesta no es de un tipo soportado.
        """
        if xml_response is None:
            raise TypeError("xml_response no puede ser None")
        if hasattr(xml_response, "read"):
            xml_response = xml_response.read()

        try:
            root = self.validator.parse(xml_response)
        except (ET.XMLSyntaxError, ValueError) as e:
            raise ParseError(f"Error parseando la respuesta XML del repositorio: {e}") from e

        if root.tag != f"{{{NS_OAI}}}OAI-PMH":
            raise ParseError(f"Elemento raíz inesperado en la respuesta: {root.tag}")

        response_date = parse_response_date(root.findtext("oai:responseDate", namespaces=ns))

        # Errores del repositorio
        error_els = root.findall("oai:error", namespaces=ns)
        if error_els:
            return self._handle_errors(error_els, response_date)

        # GetRecord
        record_el = root.find("oai:GetRecord/oai:record", namespaces=ns)
        if record_el is not None:
            record = parse_record(record_el, response_date)
            logger.debug("GetRecord: %s", record.identifier)
            return ParsedResponse(response_date=response_date, records=[record])

        # ListRecords
        list_el = root.find("oai:ListRecords", namespaces=ns)
        if list_el is not None:
            records = [
                parse_record(rec, response_date)
                for rec in list_el.findall("oai:record", namespaces=ns)
            ]
            response = ParsedResponse(response_date=response_date, records=records)

            rt_el = list_el.find("oai:resumptionToken", namespaces=ns)
            if rt_el is not None:
                response.resumption_token = normalize_space(rt_el.text) or None
                response.cursor = parse_optional_int(rt_el.get("cursor"))
                response.complete_list_size = parse_optional_int(rt_el.get("completeListSize"))

            logger.debug(
                "ListRecords: %d registros, resumptionToken=%s",
                len(records),
                response.resumption_token,
            )
            return response

        raise RepositoryError(
            "La respuesta del repositorio no es un error, GetRecord ni ListRecords"
        )

    def _handle_errors(
        self, error_els: List[ET._Element], response_date: datetime
    ) -> ParsedResponse:
        reports = rank_errors(
            RepositoryErrorReport(
                code=ErrorCode(el.get("code")),
                message=normalize_space(el.text) or "",
            )
            for el in error_els
        )

        # idDoesNotExist y noRecordsMatch no son errores: resultado vacío
        if reports[0].code in EMPTY_RESULT_CODES:
            logger.debug("Respuesta sin resultados (%s)", reports[0].code.value)
            return ParsedResponse(response_date=response_date, records=[])

        message = format_error_reports(reports)
        logger.warning(message)
        raise error_class_for(reports[0].code)(message)


def parse_record(record_el: ET._Element, retrieval_date_time: datetime) -> ArticleMetadata:
    """
    Convierte un <record> (cabecera + metadatos arXivRaw) en ArticleMetadata.
    """
    header = record_el.find("oai:header", namespaces=ns)
    if header is None:
        raise ParseError("Registro sin cabecera")

    metadata_el = record_el.find("oai:metadata", namespaces=ns)
    if metadata_el is None:
        raise ParseError(
            f"Registro sin metadatos: {_text(header, 'oai:identifier')}"
        )
    raw = metadata_el.find("arXivRaw:arXivRaw", namespaces=ns)
    if raw is None:
        raise ParseError(
            f"Los metadatos del registro {_text(header, 'oai:identifier')} no son arXivRaw"
        )

    try:
        versions = {
            ArticleVersion(
                version_number=parse_version_number(normalize_space(version_el.get("version"))),
                submission_time=parse_submission_time(_text(version_el, "arXivRaw:date")),
                size=_text(version_el, "arXivRaw:size") or "",
                source_type=_text(version_el, "arXivRaw:source_type"),
            )
            for version_el in raw.findall("arXivRaw:version", namespaces=ns)
        }

        return ArticleMetadata(
            identifier=_text(header, "oai:identifier"),
            datestamp=parse_datestamp(_text(header, "oai:datestamp")),
            sets={
                normalize_space(el.text or "")
                for el in header.findall("oai:setSpec", namespaces=ns)
            },
            deleted=header.get("status") == "deleted",
            id=_text(raw, "arXivRaw:id"),
            submitter=_text(raw, "arXivRaw:submitter"),
            versions=versions,
            title=_text(raw, "arXivRaw:title"),
            authors=_text(raw, "arXivRaw:authors"),
            categories=parse_categories(_text(raw, "arXivRaw:categories")),
            comments=_text(raw, "arXivRaw:comments"),
            proxy=_text(raw, "arXivRaw:proxy"),
            report_no=_text(raw, "arXivRaw:report-no"),
            acm_class=_text(raw, "arXivRaw:acm-class"),
            msc_class=_text(raw, "arXivRaw:msc-class"),
            journal_ref=_text(raw, "arXivRaw:journal-ref"),
            doi=_text(raw, "arXivRaw:doi"),
            license=_text(raw, "arXivRaw:license"),
            abstract=_text(raw, "arXivRaw:abstract"),
            retrieval_date_time=retrieval_date_time,
        )
    except ValidationError as e:
        raise ParseError(
            f"Registro con campos inválidos: {_text(header, 'oai:identifier')}"
        ) from e
