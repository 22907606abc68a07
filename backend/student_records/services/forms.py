"""
État commun des formulaires : valeurs saisies et indicateur d'occupation.
"""

import functools
from typing import Any, Dict, Mapping, Optional, Tuple

from student_records import messages
from student_records.errors import BusyError
from student_records.results import Err


def single_flight(method):
    """Refuse une soumission tant que la précédente n'est pas terminée (une seule en vol par formulaire)."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        if self.busy:
            return Err(BusyError(messages.BUSY))
        self.busy = True
        try:
            return await method(self, *args, **kwargs)
        finally:
            self.busy = False

    return wrapper


class FormState:
    """Valeurs d'un formulaire : conservées en cas d'échec, remises à zéro après succès."""

    fields: Tuple[str, ...] = ()

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self.busy = False
        self.values: Dict[str, str] = self.blank()
        if initial:
            self.load(initial)

    def blank(self) -> Dict[str, str]:
        return {name: "" for name in self.fields}

    def load(self, raw: Mapping[str, Any]) -> None:
        for name in self.fields:
            if name in raw and raw[name] is not None:
                self.values[name] = str(raw[name])

    def reset(self) -> None:
        self.values = self.blank()
