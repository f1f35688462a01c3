import logging
from datetime import date
from typing import Optional

from fastapi import FastAPI, HTTPException, Query

from arxiv_harvester.config import HarvesterConfig
from arxiv_harvester.errors import (
    BadArgumentError,
    BadResumptionTokenError,
    IllegalArgumentError,
    ParseError,
    RepositoryError,
    TransportError,
)
from arxiv_harvester.models.article import ArticleMetadata, ParsedResponse
from arxiv_harvester.models.requests import (
    HarvestRequest,
    ListRecordsRequest,
    ResumeListRecordsRequest,
)
from arxiv_harvester.services.oai_client import ArxivHarvester

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Cosechador OAI-PMH de arXiv",
    version="0.1.0",
    description=(
        "API para consultar el repositorio OAI-PMH de arXiv (formato arXivRaw). "
        "No guarda nada: cada llamada devuelve una página y el resumptionToken "
        "para pedir la siguiente."
    ),
)

# --- Cosechador (transporte httpx + parser con validación XSD) ---

harvester = ArxivHarvester(config=HarvesterConfig.from_env())


def _to_http_error(e: Exception) -> HTTPException:
    """
    Traduce los errores del cosechador a códigos HTTP.
    """
    if isinstance(e, (IllegalArgumentError, BadArgumentError)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, BadResumptionTokenError):
        # El token caducó: hay que reiniciar la cosecha desde el principio
        return HTTPException(status_code=410, detail=str(e))
    logger.error("Error consultando arXiv: %s", e)
    return HTTPException(status_code=502, detail=f"Error consultando arXiv: {e}")


# --- Healthcheck ---

@app.get("/health")
def health() -> dict:
    """
    Comprobación simple de vida del servicio.
    """
    return {"status": "ok"}


# --- GetRecord ---

@app.get("/records/{identifier:path}", response_model=ArticleMetadata)
def get_record(identifier: str) -> ArticleMetadata:
    """
    Un registro por identificador OAI (p.ej. oai:arXiv.org:0704.0001).
    """
    try:
        record = harvester.get_record(identifier)
    except (IllegalArgumentError, RepositoryError, ParseError, TransportError) as e:
        raise _to_http_error(e)

    if record is None:
        raise HTTPException(status_code=404, detail=f"No existe el registro {identifier}")
    return record


# --- ListRecords (una página) ---

@app.get("/records", response_model=ParsedResponse)
def list_records(
    from_date: Optional[date] = Query(None, alias="from", description="Datestamp desde (YYYY-MM-DD)"),
    until_date: Optional[date] = Query(None, alias="until", description="Datestamp hasta (YYYY-MM-DD)"),
    set_spec: Optional[str] = Query(None, alias="set", description="Set de arXiv, p.ej. physics:hep-th"),
    resumption_token: Optional[str] = Query(
        None, description="Token de la página anterior; si se indica, se ignoran los demás parámetros"
    ),
) -> ParsedResponse:
    """
    Devuelve una página de ListRecords. Para la siguiente página hay que volver a
    llamar con el resumption_token de la respuesta.
    """
    try:
        request: HarvestRequest
        if resumption_token is not None:
            request = ResumeListRecordsRequest(resumption_token)
        else:
            request = ListRecordsRequest(from_date, until_date, set_spec)
        return harvester.fetch(request)
    except (IllegalArgumentError, RepositoryError, ParseError, TransportError) as e:
        raise _to_http_error(e)
