import logging
import time
from typing import Callable, Iterator, Optional, Protocol

import httpx

from arxiv_harvester.config import HarvesterConfig
from arxiv_harvester.errors import TransportError
from arxiv_harvester.models.article import ArticleMetadata, ParsedResponse
from arxiv_harvester.models.requests import (
    GetRecordRequest,
    HarvestRequest,
    ResumeListRecordsRequest,
)
from arxiv_harvester.services.xml_parser import ResponseParser

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def fetch(self, url: str) -> bytes:
        """
        Devuelve el cuerpo de la respuesta o lanza TransportError.
        """
        ...


class HttpxTransport:
    """
    Transporte HTTP con httpx.

    arXiv hace control de flujo respondiendo 503 con cabecera Retry-After
    (segundos); en ese caso se espera y se repite la petición, como mucho
    max_retry_after veces. Cualquier otro código no 2xx es un TransportError.
    """

    def __init__(
        self,
        config: Optional[HarvesterConfig] = None,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or HarvesterConfig()
        self.client = client or httpx.Client(
            timeout=self.config.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.config.user_agent},
        )
        self._sleep = sleep

    def fetch(self, url: str) -> bytes:
        retries = 0
        while True:
            try:
                resp = self.client.get(url)
            except httpx.HTTPError as e:
                raise TransportError(f"Error de transporte en petición OAI: {url}: {e}") from e

            if resp.status_code == 503 and "Retry-After" in resp.headers:
                wait = _parse_retry_after(resp.headers["Retry-After"])
                if wait is not None and retries < self.config.max_retry_after:
                    retries += 1
                    logger.info(
                        "HTTP 503 con Retry-After=%ss (intento %d/%d), URL=%s",
                        wait,
                        retries,
                        self.config.max_retry_after,
                        url,
                    )
                    self._sleep(wait)
                    continue

            try:
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                raise TransportError(
                    f"Error HTTP {status} en petición OAI: {url}", status_code=status
                ) from e

            return resp.content

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _parse_retry_after(value: str) -> Optional[int]:
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    return max(seconds, 0)


class ArxivHarvester:
    """
    Cosecha de arXiv vía OAI-PMH: petición -> parseo -> resumptionToken -> siguiente petición.

    Las páginas se piden de una en una y solo cuando el consumidor avanza;
    si deja de iterar no se pide la siguiente. La cosecha termina cuando una
    respuesta no trae resumptionToken.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        parser: Optional[ResponseParser] = None,
        config: Optional[HarvesterConfig] = None,
    ):
        self.config = config or HarvesterConfig()
        self.transport = transport or HttpxTransport(self.config)
        self.parser = parser or ResponseParser()

    def fetch(self, request: HarvestRequest) -> ParsedResponse:
        url = request.url(self.config.base_url)
        logger.debug("Petición OAI: %s", url)
        return self.parser.parse(self.transport.fetch(url))

    @staticmethod
    def next_request(response: ParsedResponse) -> Optional[ResumeListRecordsRequest]:
        if not response.resumption_token:
            return None
        return ResumeListRecordsRequest(response.resumption_token)

    def iter_pages(
        self, request: HarvestRequest, max_pages: Optional[int] = None
    ) -> Iterator[ParsedResponse]:
        """
        Itera sobre las páginas de la respuesta, siguiendo los resumptionToken.
        max_pages limita el número de páginas pedidas (None = todas).
        """
        current: Optional[HarvestRequest] = request
        pages = 0
        while current is not None:
            if max_pages is not None and pages >= max_pages:
                logger.info("Alcanzado el máximo de %d páginas", max_pages)
                return

            response = self.fetch(current)
            pages += 1
            logger.info(
                "Página %d: %d registros (cursor=%s, completeListSize=%s)",
                pages,
                len(response.records),
                response.cursor,
                response.complete_list_size,
            )
            yield response

            current = self.next_request(response)

    def iter_records(
        self, request: HarvestRequest, max_pages: Optional[int] = None
    ) -> Iterator[ArticleMetadata]:
        for page in self.iter_pages(request, max_pages=max_pages):
            yield from page.records

    def get_record(self, identifier: str) -> Optional[ArticleMetadata]:
        """
        Un único registro por identificador OAI; None si no existe.
        """
        response = self.fetch(GetRecordRequest(identifier))
        return response.records[0] if response.records else None

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()
