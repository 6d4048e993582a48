from constructo.db.repos.access_repo import AccessRepo
from constructo.db.repos.domain_repo import DomainGateway
from constructo.db.repos.report_repo import ReportJobRepo

__all__ = ["AccessRepo", "DomainGateway", "ReportJobRepo"]
