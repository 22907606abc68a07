"""
Formulaire élève, partagé entre la création et la modification.
La présence d'un élève existant détermine le mode.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from student_records import messages
from student_records.errors import AuthError, ConstraintError, TransportError
from student_records.results import Err, Ok, Result, attempt
from student_records.schemas.student import StudentFormState
from student_records.services.backend import Backend
from student_records.services.forms import FormState, single_flight
from student_records.validation import validate_student

logger = logging.getLogger(__name__)


class StudentFields(FormState):
    fields = ("full_name", "email", "matricula")


class StudentForm:
    def __init__(
        self,
        backend: Backend,
        table: str,
        on_success: Callable[[], Awaitable[Any]],
        student: Optional[Dict[str, Any]] = None,
    ):
        self.backend = backend
        self.table = table
        self.on_success = on_success
        self.student = student
        self.form = StudentFields(student)
        self.busy = False

    @property
    def is_update(self) -> bool:
        return self.student is not None

    def state(self) -> StudentFormState:
        return StudentFormState(
            student_id=self.student["id"] if self.student else None,
            busy=self.busy,
            **self.form.values,
        )

    @single_flight
    async def submit(self, raw: Mapping[str, Any]) -> Result[str, Any]:
        self.form.load(raw)
        validated = validate_student(self.form.values)
        if not validated.ok:
            return validated
        data = validated.value.model_dump()

        if self.is_update:
            result = await attempt(self.backend.update(self.table, self.student["id"], data))
            notice = messages.STUDENT_UPDATED
        else:
            session = await attempt(self.backend.get_session())
            if not session.ok:
                return Err(TransportError(messages.SAVE_FAILED + session.error.message))
            if session.value is None:
                return Err(AuthError(messages.NOT_AUTHENTICATED))
            result = await attempt(self.backend.insert(self.table, {**data, "user_id": session.value.user.id}))
            notice = messages.STUDENT_CREATED

        if not result.ok:
            if result.error.is_duplicate_key:
                return Err(ConstraintError(messages.STUDENT_DUPLICATE))
            return Err(TransportError(messages.SAVE_FAILED + result.error.message))

        logger.info("Élève %s : %s", "modifié" if self.is_update else "créé", data["matricula"])
        await self.on_success()
        if not self.is_update:
            self.form.reset()
        return Ok(notice)
