import os
from dataclasses import dataclass

from arxiv_harvester.errors import HarvesterError

DEFAULT_BASE_URL = "http://export.arxiv.org/oai2"
METADATA_PREFIX = "arXivRaw"


def _env_number(name: str, default, convert):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return convert(raw)
    except ValueError as e:
        raise HarvesterError(f"Valor no numérico en la variable de entorno {name}: '{raw}'") from e


@dataclass
class HarvesterConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    # Número máximo de respuestas 503 + Retry-After que se respetan por petición
    max_retry_after: int = 3
    user_agent: str = "arxiv-oai-harvester/0.1"

    @classmethod
    def from_env(cls) -> "HarvesterConfig":
        """
        Lee la configuración desde variables de entorno (ARXIV_OAI_*),
        usando los valores por defecto para las que no estén definidas.
        """
        defaults = cls()
        return cls(
            base_url=os.environ.get("ARXIV_OAI_BASE_URL", defaults.base_url),
            timeout=_env_number("ARXIV_OAI_TIMEOUT", defaults.timeout, float),
            max_retry_after=_env_number("ARXIV_OAI_MAX_RETRY_AFTER", defaults.max_retry_after, int),
            user_agent=os.environ.get("ARXIV_OAI_USER_AGENT", defaults.user_agent),
        )
