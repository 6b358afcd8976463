"""Route handlers for the Hifz tracker API."""

from hifz.web.routes.health import router as health_router
from hifz.web.routes.lessons import router as lessons_router
from hifz.web.routes.mistakes import router as mistakes_router
from hifz.web.routes.sessions import router as sessions_router
from hifz.web.routes.stats import router as stats_router
from hifz.web.routes.student import router as student_router
from hifz.web.routes.students import router as students_router
from hifz.web.routes.teacher import router as teacher_router
from hifz.web.routes.users import router as users_router

__all__ = [
    "health_router",
    "users_router",
    "students_router",
    "sessions_router",
    "mistakes_router",
    "stats_router",
    "teacher_router",
    "student_router",
    "lessons_router",
]
