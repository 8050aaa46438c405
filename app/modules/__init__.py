"""Domain modules package."""

from app.modules.lesson_requests import models as lesson_requests_models  # noqa: F401
from app.modules.lessons import models as lessons_models  # noqa: F401
from app.modules.lifecycle import models as lifecycle_models  # noqa: F401
from app.modules.objectives import models as objectives_models  # noqa: F401
from app.modules.outbox import models as outbox_models  # noqa: F401
from app.modules.quotes import models as quotes_models  # noqa: F401
from app.modules.teachers import models as teachers_models  # noqa: F401
