# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.

from academy.models.student import Student  # noqa: F401  (doit précéder les tables dépendantes)
from academy.models.group import Group  # noqa: F401
from academy.models.suspension import Suspension  # noqa: F401
from academy.models.attendance import Attendance  # noqa: F401
from academy.models.payment import Payment  # noqa: F401
