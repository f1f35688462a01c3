from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Union

import httpx

from arxiv_harvester.config import METADATA_PREFIX
from arxiv_harvester.errors import IllegalArgumentError


def _build_url(base_url: str, params: Dict[str, str]) -> str:
    return str(httpx.URL(base_url.rstrip("?"), params=params))


@dataclass(frozen=True)
class GetRecordRequest:
    """
    GetRecord: un único registro por identificador OAI
    (p.ej. "oai:arXiv.org:0704.0001").
    """

    identifier: str

    def __post_init__(self) -> None:
        if not self.identifier or not self.identifier.strip():
            raise IllegalArgumentError("El identificador no puede estar vacío")

    def params(self) -> Dict[str, str]:
        return {
            "verb": "GetRecord",
            "identifier": self.identifier,
            "metadataPrefix": METADATA_PREFIX,
        }

    def url(self, base_url: str) -> str:
        return _build_url(base_url, self.params())


@dataclass(frozen=True)
class ListRecordsRequest:
    """
    ListRecords por rango de fechas (datestamp) y/o set.
    Los parámetros ausentes no se incluyen en la URL.
    """

    from_date: Optional[date] = None
    until_date: Optional[date] = None
    set_spec: Optional[str] = None

    def __post_init__(self) -> None:
        if (
            self.from_date is not None
            and self.until_date is not None
            and self.from_date > self.until_date
        ):
            raise IllegalArgumentError(
                f"Rango de fechas inválido: from={self.from_date} es posterior a "
                f"until={self.until_date}"
            )

    def params(self) -> Dict[str, str]:
        params = {
            "verb": "ListRecords",
            "metadataPrefix": METADATA_PREFIX,
        }
        if self.from_date is not None:
            params["from"] = self.from_date.isoformat()
        if self.until_date is not None:
            params["until"] = self.until_date.isoformat()
        if self.set_spec:
            params["setSpec"] = self.set_spec
        return params

    def url(self, base_url: str) -> str:
        return _build_url(base_url, self.params())


@dataclass(frozen=True)
class ResumeListRecordsRequest:
    """
    Continuación de un ListRecords a partir del resumptionToken de la página anterior.
    """

    resumption_token: str

    def __post_init__(self) -> None:
        if not self.resumption_token:
            raise IllegalArgumentError("El resumptionToken no puede estar vacío")

    def params(self) -> Dict[str, str]:
        return {
            "verb": "ListRecords",
            "resumptionToken": self.resumption_token,
        }

    def url(self, base_url: str) -> str:
        return _build_url(base_url, self.params())


HarvestRequest = Union[GetRecordRequest, ListRecordsRequest, ResumeListRecordsRequest]
