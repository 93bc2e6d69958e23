"""Confirmation gate shown before any database work starts."""

import logging
from typing import List

from sqlbatch.config import RunConfig
from sqlbatch.errors import OperatorDeclined
from .models import ScriptFile

logger = logging.getLogger(__name__)

CONFIRM_PROMPT = "Execute these scripts? (Y/N): "


def render_summary(config: RunConfig, scripts: List[ScriptFile]) -> List[str]:
    """Lines describing the resolved run, in display order."""
    lines = [
        f"Server:        {config.server}",
        f"Database:      {config.database}",
        f"Output format: {config.output_format.value}",
        f"Credentials:   {config.auth.describe()}",
        f"Script folder: {config.script_dir}",
        "",
    ]

    if scripts:
        lines.append(f"Scripts to run ({len(scripts)}):")
        lines.extend(f"  {script.name}" for script in scripts)
    else:
        lines.append("No script files found.")

    return lines


def confirm_run(config: RunConfig, scripts: List[ScriptFile], operator) -> None:
    """
    Show the run summary and require the operator's go-ahead.

    Raises:
        OperatorDeclined: any answer other than y/yes
    """
    for line in render_summary(config, scripts):
        operator.emit(line)

    if not operator.confirm(CONFIRM_PROMPT):
        logger.info("Run declined at confirmation")
        raise OperatorDeclined()

    logger.info(f"Run confirmed for {len(scripts)} script(s)")
