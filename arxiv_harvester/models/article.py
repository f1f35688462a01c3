from typing import List, Optional, Set
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class ArticleVersion(BaseModel):
    # Inmutable para poder guardarlo en un set
    model_config = ConfigDict(frozen=True)

    version_number: int = Field(gt=0)
    submission_time: datetime
    size: str
    source_type: Optional[str] = None


class ArticleMetadata(BaseModel):
    # Cabecera OAI
    identifier: str
    datestamp: date
    sets: Set[str] = Field(default_factory=set)
    deleted: bool = False

    # Metadatos arXivRaw
    id: str
    submitter: Optional[str] = None
    versions: Set[ArticleVersion] = Field(default_factory=set)
    title: str
    authors: str
    categories: List[str] = Field(default_factory=list)
    comments: Optional[str] = None
    proxy: Optional[str] = None
    report_no: Optional[str] = None
    acm_class: Optional[str] = None
    msc_class: Optional[str] = None
    journal_ref: Optional[str] = None
    doi: Optional[str] = None
    license: Optional[str] = None
    abstract: str

    retrieval_date_time: datetime

    def latest_version(self) -> Optional[ArticleVersion]:
        if not self.versions:
            return None
        return max(self.versions, key=lambda v: v.version_number)


class ParsedResponse(BaseModel):
    response_date: datetime  # UTC
    records: List[ArticleMetadata] = Field(default_factory=list)

    # Solo presentes si quedan más páginas
    resumption_token: Optional[str] = None
    cursor: Optional[int] = None
    complete_list_size: Optional[int] = None

    @property
    def has_more(self) -> bool:
        return bool(self.resumption_token)
