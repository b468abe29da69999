from timegrid.models.activity_log import ActivityLog  # noqa: F401
from timegrid.models.schedule import Schedule, schedule_students  # noqa: F401
from timegrid.models.student import Student  # noqa: F401
from timegrid.models.subject import Subject, SubjectType  # noqa: F401
from timegrid.models.teacher import Teacher  # noqa: F401
from timegrid.models.user import User, UserRole  # noqa: F401
from timegrid.models.year_group import YearGroup  # noqa: F401
