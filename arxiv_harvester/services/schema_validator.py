import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from lxml import etree as ET

from arxiv_harvester.errors import HarvesterError

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"

NS_OAI = "http://www.openarchives.org/OAI/2.0/"
NS_ARXIV_RAW = "http://arxiv.org/OAI/arXivRaw/"

SCHEMA_FILES = {
    NS_OAI: "OAI-PMH.xsd",
    NS_ARXIV_RAW: "arXivRaw.xsd",
}


def _driver_schema(schema_dir: Path) -> bytes:
    # Esquema sin targetNamespace que importa ambos para validarlos juntos
    imports = "\n".join(
        f'  <xs:import namespace="{namespace}" schemaLocation="{(schema_dir / filename).as_uri()}"/>'
        for namespace, filename in SCHEMA_FILES.items()
    )
    return (
        '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">\n'
        f"{imports}\n"
        "</xs:schema>"
    ).encode("utf-8")


class SchemaValidator:
    """
    Valida las respuestas contra el esquema OAI-PMH 2.0 y el esquema arXivRaw
    (revisión 2014-06-24) a la vez, mientras se parsea el XML.

    No guarda estado entre llamadas: una misma instancia se puede reutilizar
    en todas las cosechas.
    """

    def __init__(self, schema_dir: Optional[Union[str, Path]] = None):
        self.schema_dir = Path(schema_dir).resolve() if schema_dir else SCHEMA_DIR

        for filename in SCHEMA_FILES.values():
            path = self.schema_dir / filename
            if not path.is_file():
                raise HarvesterError(f"No se encuentra el esquema XSD: {path}")
            # libxml2 solo avisa (no falla) si un xs:import no se puede cargar,
            # así que cada esquema se compila también por separado
            try:
                ET.XMLSchema(ET.parse(str(path)))
            except (ET.XMLSchemaParseError, ET.XMLSyntaxError) as e:
                raise HarvesterError(f"Esquema XSD inválido {path}: {e}") from e

        try:
            self.schema = ET.XMLSchema(ET.fromstring(_driver_schema(self.schema_dir)))
        except (ET.XMLSchemaParseError, ET.XMLSyntaxError) as e:
            raise HarvesterError(f"Error creando el esquema de validación: {e}") from e

        logger.debug("Esquemas de validación cargados desde %s", self.schema_dir)

    def _parser(self) -> ET.XMLParser:
        # Un parser por llamada: XMLParser no es seguro entre hilos
        return ET.XMLParser(
            schema=self.schema,
            resolve_entities=False,
            no_network=True,
            remove_blank_text=False,
        )

    def parse(self, xml_bytes: bytes) -> ET._Element:
        """
        Parsea y valida en un solo paso.
        Lanza ET.XMLSyntaxError si el XML está mal formado o no es válido.
        """
        return ET.fromstring(xml_bytes, parser=self._parser())

    def validate(self, element: ET._Element) -> bool:
        return self.schema.validate(element)


@lru_cache(maxsize=1)
def get_default_validator() -> SchemaValidator:
    """
    Instancia compartida con los esquemas incluidos en el paquete.
    """
    return SchemaValidator()
