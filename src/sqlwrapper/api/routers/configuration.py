#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Configuration endpoints.
#
"""
Configuration API router - read and change the configurable aspects.
"""

from fastapi import APIRouter, Depends

from sqlwrapper.api.dependencies import get_commands
from sqlwrapper.api.error_handling import handle_sql_errors
from sqlwrapper.api.models import ConfigureRequest, FullConfigurationResponse, SettingResponse
from sqlwrapper.commands import SqlCommands

router = APIRouter(prefix="/configuration", tags=["configuration"])


@router.get("/", response_model=FullConfigurationResponse)
@handle_sql_errors("read configuration")
def get_full_configuration(commands: SqlCommands = Depends(get_commands)):
    """All visible aspects; passwords are masked."""
    return FullConfigurationResponse(aspects=commands.get_full_configuration())


@router.get("/{name}", response_model=SettingResponse)
@handle_sql_errors("read configuration")
def get_configuration(name: str, commands: SqlCommands = Depends(get_commands)):
    return SettingResponse(name=name, settings=commands.get_configuration(name))


@router.put("/{name}", response_model=SettingResponse)
@handle_sql_errors("configure")
def configure(name: str, request: ConfigureRequest, commands: SqlCommands = Depends(get_commands)):
    """
    Change options of an aspect.
    Changing 'defaultconnection' or 'connectionpool' rebuilds the pool and
    closes all pooled sessions.
    """
    commands.configure(name, request.settings)
    return SettingResponse(name=name, settings=commands.get_configuration(name))
