#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Pydantic models for API request/response validation.
#
"""
Pydantic models for API request/response validation
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

# Values accepted as statement parameters
ParameterValue = Union[bool, int, float, str, None]
# Values produced by row conversion
ColumnValue = Union[bool, float, str]


class ConnectRequest(BaseModel):
    """Explicit connection parameters (keys of the connection aspect)"""
    settings: dict[str, str]


class ExecuteRequest(BaseModel):
    """Statement to execute"""
    sql: str = Field(min_length=1)
    params: list[ParameterValue] = []
    mode: Literal["direct", "query", "update"] = "direct"


class ExecuteResponse(BaseModel):
    """Outcome of an execute"""
    has_cursor: bool
    row_count: int = -1


class RowResponse(BaseModel):
    row: list[ColumnValue]


class RowsResponse(BaseModel):
    rows: list[list[ColumnValue]]


class StatusResponse(BaseModel):
    """Boolean state of a caller"""
    value: bool


class RowCountResponse(BaseModel):
    row_count: int


class DatabaseRequest(BaseModel):
    name: str = Field(min_length=1)


class DatabaseResponse(BaseModel):
    name: str


class ConfigureRequest(BaseModel):
    """Options to change; either a mapping or a list of [key, value] pairs"""
    settings: Union[dict[str, str], list[list[str]]]


class SettingResponse(BaseModel):
    name: str
    settings: list[list[str]]


class FullConfigurationResponse(BaseModel):
    aspects: dict[str, list[list[str]]]


class LogRequest(BaseModel):
    level: str = "INFO"
    message: str


class VersionResponse(BaseModel):
    version: str
    name: Optional[str] = "sqlwrapper"
