from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class LocationDTO(BaseModel):
    unit: str
    line: int
    column: int


class CountGroupDTO(BaseModel):
    count: int
    locations: List[LocationDTO]


class IssueDTO(BaseModel):
    kind: str
    message: str
    label: Optional[str] = None
    declared: Optional[int] = None
    actual: Optional[int] = None
    reason: Optional[str] = None
    raw: Optional[str] = None
    defaulted: Optional[bool] = None
    locations: List[LocationDTO] = []
    conflicting: List[CountGroupDTO] = []


class CheckSummaryDTO(BaseModel):
    units: int
    comments: int
    labels: int
    invalid: int
    issues: int


class CheckResponseDTO(BaseModel):
    clean: bool
    summary: CheckSummaryDTO
    issues: List[IssueDTO]


class ShowResponseDTO(BaseModel):
    label: str
    found: bool
    locations: List[LocationDTO] = []


class ListResponseDTO(BaseModel):
    labels: List[str]
