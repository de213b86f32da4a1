from .user import UserCreate, UserLogin, UserOut, UserBasic
from .tokens import Token
from .team import TeamCreate, TeamUpdate, TeamOut, TeamSummary, TeamDetail, TeamMemberOut, TeamMemberAdd
from .task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskOut, TeamBasic
