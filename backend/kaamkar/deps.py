from .config import settings
from .persistence import get_store
from .services.assistant import Assistant
from .services.dashboard import DashboardService
from .services.finance import FinanceService
from .services.goals import GoalService
from .services.gym import GymService
from .services.notes import NoteService
from .services.planner import PlannerService
from .services.todos import TodoService
from .services.users import UserService

store = get_store(settings)

users = UserService(store)
notes = NoteService(store)
todos = TodoService(store)
planner = PlannerService(store)
finance = FinanceService(store)
goals = GoalService(store)
gym = GymService(store)
dashboard = DashboardService(store)


def get_assistant() -> Assistant:
    return Assistant.from_settings(settings)
