from .user import User
from .team import Team, TeamMember, TeamRole
from .task import Task, TaskStatus, TaskPriority
