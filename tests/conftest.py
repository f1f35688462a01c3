"""Fixtures compartidos: respuestas XML de ejemplo y un transporte falso."""

from pathlib import Path
from typing import Dict, List

import pytest

from arxiv_harvester.errors import TransportError
from arxiv_harvester.services.schema_validator import get_default_validator
from arxiv_harvester.services.xml_parser import ResponseParser

DATA_DIR = Path(__file__).resolve().parent / "data"


def load_xml(name: str) -> bytes:
    return (DATA_DIR / name).read_bytes()


def error_response(*errors) -> bytes:
    """Sobre OAI-PMH con uno o varios <error code="...">."""
    body = "\n".join(
        f'<error code="{code}">{message}</error>' for code, message in errors
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<OAI-PMH xmlns="http://www.openarchives.org/OAI/2.0/">
<responseDate>2015-01-06T13:51:59Z</responseDate>
<request verb="ListRecords">http://export.arxiv.org/oai2</request>
{body}
</OAI-PMH>""".encode("utf-8")


class FakeTransport:
    """Devuelve respuestas preparadas por URL y apunta las URLs pedidas."""

    def __init__(self, responses: Dict[str, bytes]):
        self.responses = responses
        self.requested: List[str] = []

    def fetch(self, url: str) -> bytes:
        self.requested.append(url)
        if url not in self.responses:
            raise TransportError(f"URL inesperada: {url}", status_code=404)
        return self.responses[url]


@pytest.fixture(scope="session")
def parser():
    return ResponseParser(get_default_validator())


@pytest.fixture
def get_record_xml():
    return load_xml("get_record.xml")


@pytest.fixture
def list_records_xml():
    return load_xml("list_records.xml")


@pytest.fixture
def list_records_last_xml():
    return load_xml("list_records_last.xml")


@pytest.fixture
def make_error_response():
    return error_response


@pytest.fixture
def make_transport():
    return FakeTransport


@pytest.fixture
def xml_data():
    return load_xml
