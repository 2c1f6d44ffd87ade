from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from .rules import EXCLUDED_NAME_TERMS, INCLUDED_CATEGORIES


class FilterConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: FrozenSet[str] = Field(default_factory=lambda: frozenset(INCLUDED_CATEGORIES))
    excluded_terms: Tuple[str, ...] = Field(default=EXCLUDED_NAME_TERMS)


class ColumnPositions(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    name: int = Field(ge=0)
    category: int = Field(ge=0)

    @property
    def min_width(self) -> int:
        return max(self.id, self.name, self.category) + 1


class ItemRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)


class FilterStats(BaseModel):
    rows_seen: int = 0
    accepted: int = 0
    rejected: Dict[str, int] = Field(default_factory=dict)

    def reject(self, reason: str) -> None:
        self.rejected[reason] = self.rejected.get(reason, 0) + 1


class CategoryExport(BaseModel):
    category: str
    path: str
    items: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ExportSummary(BaseModel):
    aggregate_path: str
    total_items: int = 0
    categories: List[CategoryExport] = Field(default_factory=list)

    @property
    def written(self) -> List[CategoryExport]:
        return [c for c in self.categories if c.ok]

    @property
    def failed(self) -> List[CategoryExport]:
        return [c for c in self.categories if not c.ok]
