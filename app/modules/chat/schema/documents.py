from pydantic import BaseModel
from typing import Optional


class RelevantDocument(BaseModel):
    """A similarity-search hit; source and dept_name may be missing in badly indexed entries."""
    page_content: str = ""
    source: Optional[str] = None
    dept_name: Optional[str] = None
    id: str
    score: Optional[float] = None


class CitationItem(BaseModel):
    name: str
    id: str
    source: Optional[str] = None
