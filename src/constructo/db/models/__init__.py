from constructo.db.models.company import Company, Subscription, User, Worker
from constructo.db.models.project import Material, Project, Task
from constructo.db.models.report import ReportJob

__all__ = [
    "Company",
    "Material",
    "Project",
    "ReportJob",
    "Subscription",
    "Task",
    "User",
    "Worker",
]
