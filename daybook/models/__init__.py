# daybook/models/__init__.py
from daybook.models.users import User, LoginSession
from daybook.models.todo import Todo, TimeTaken
from daybook.models.project import Project, Section
from daybook.models.money import Money
from daybook.models.health import Health
from daybook.models.memo import Memo, MonthlyMemo
