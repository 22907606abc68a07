# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata)
# avant que SQLAlchemy tente de résoudre la clé étrangère students.user_id → users.id.

from student_records.models.user import User  # noqa: F401
from student_records.models.student import Student  # noqa: F401
