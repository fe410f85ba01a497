from typing import List

from pydantic import BaseModel


class SheetInfo(BaseModel):
    sheet_id: int
    title: str


class Subject(BaseModel):
    name: str
    internal: int
    external: int
    total: int


class MarksReport(BaseModel):
    course: str
    fees: bool
    name: str
    semester: str
    subjects: List[Subject]
