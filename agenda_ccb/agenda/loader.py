"""Agenda file loading."""

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from agenda_ccb.models.agenda import Agenda
from agenda_ccb.utils.logger import log_debug


class AgendaError(Exception):
    """Raised when the agenda file cannot be read."""


def load_agenda(path: Union[str, Path]) -> Agenda:
    """Read and validate the agenda JSON file.

    Individual events with a bad start value are kept here; only a missing
    file or a document that is not an agenda is an error.

    Raises:
        AgendaError: If the file is missing, not JSON, or not an agenda object
    """
    path = Path(path)
    if not path.exists():
        raise AgendaError(f"Agenda file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise AgendaError(f"Agenda file is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise AgendaError("Agenda file must contain a JSON object")

    try:
        agenda = Agenda.model_validate(data)
    except ValidationError as e:
        raise AgendaError(f"Invalid agenda: {e}") from e

    log_debug(f"Loaded {len(agenda.events)} event(s) from {path}")
    return agenda
