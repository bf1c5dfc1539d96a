from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel


class ViewParamsModel(BaseModel):
    active_tab: Literal["data-entry", "resources", "military"] = "resources"
    sort_key: Union[int, str] = "resource"
    sort_direction: Literal["ascending", "descending"] = "ascending"
    search_term: str = ""


class JsonInputModel(BaseModel):
    json_input: str
