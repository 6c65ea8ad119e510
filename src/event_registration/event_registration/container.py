from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .auth.service import AuthService
from .auth.tokens import TokenService
from .core.constants import DEFAULT_TOKEN_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory_repository import MySQLDepartmentRepository, MySQLRoleRepository
from .directory.repository import DepartmentRepository, RoleRepository
from .directory.service import DirectoryService
from .events.factory import EventStatusStrategyFactory
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .events.sweep import EventSweeper
from .forms.mysql_form_repository import MySQLFormRepository
from .forms.repository import FormRepository
from .forms.service import FormService
from .inscriptions.mysql_inscription_repository import MySQLInscriptionRepository
from .inscriptions.repository import InscriptionRepository
from .inscriptions.service import InscriptionService
from .notifications.dispatch import InlineDispatcher, ThreadPoolDispatcher
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .reporting.mysql_report_repository import MySQLReportRepository
from .reporting.repository import ReportRepository
from .reporting.service import ReportService
from .uploads.storage import LocalFileStorage
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    roles: RoleRepository
    departments: DepartmentRepository
    events: EventRepository
    forms: FormRepository
    inscriptions: InscriptionRepository
    notifications: NotificationRepository
    reports: ReportRepository


@dataclass(frozen=True)
class Container:
    repos: Repositories
    storage: LocalFileStorage

    auth_service: AuthService
    user_service: UserService
    directory_service: DirectoryService
    form_service: FormService
    event_service: EventService
    inscription_service: InscriptionService
    notification_service: NotificationService
    report_service: ReportService
    sweeper: EventSweeper

    conn: Optional[DatabaseConnection] = None


def mysql_repositories(conn: DatabaseConnection) -> Repositories:
    return Repositories(
        users=MySQLUserRepository(conn),
        roles=MySQLRoleRepository(conn),
        departments=MySQLDepartmentRepository(conn),
        events=MySQLEventRepository(conn),
        forms=MySQLFormRepository(conn),
        inscriptions=MySQLInscriptionRepository(conn),
        notifications=MySQLNotificationRepository(conn),
        reports=MySQLReportRepository(conn),
    )


def wire_services(
    repos: Repositories,
    *,
    jwt_secret: str,
    upload_folder: str | Path,
    jwt_expires_days: int = DEFAULT_TOKEN_DAYS,
    notifications_async: bool = False,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service on top of the given repositories."""
    storage = LocalFileStorage(upload_folder)
    strategy_factory = EventStatusStrategyFactory()
    dispatcher = ThreadPoolDispatcher() if notifications_async else InlineDispatcher()

    notification_service = NotificationService(repos.notifications, repos.users, dispatcher=dispatcher)
    user_service = UserService(repos.users, repos.roles, repos.departments, storage=storage)
    auth_service = AuthService(repos.users, user_service, TokenService(jwt_secret, expires_days=jwt_expires_days))
    event_service = EventService(
        repos.events,
        repos.inscriptions,
        repos.users,
        notification_service,
        strategy_factory=strategy_factory,
    )

    return Container(
        repos=repos,
        storage=storage,
        auth_service=auth_service,
        user_service=user_service,
        directory_service=DirectoryService(repos.roles, repos.departments),
        form_service=FormService(repos.forms, repos.events),
        event_service=event_service,
        inscription_service=InscriptionService(
            repos.inscriptions,
            repos.events,
            repos.users,
            repos.forms,
            notification_service,
            storage=storage,
        ),
        notification_service=notification_service,
        report_service=ReportService(repos.reports, repos.events, repos.users, repos.inscriptions, repos.forms),
        sweeper=EventSweeper(
            repos.events,
            repos.inscriptions,
            repos.users,
            notification_service,
            event_service,
            strategy_factory=strategy_factory,
        ),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    upload_folder: str | Path,
    jwt_expires_days: int = DEFAULT_TOKEN_DAYS,
    notifications_async: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire_services(
        mysql_repositories(conn),
        jwt_secret=jwt_secret,
        upload_folder=upload_folder,
        jwt_expires_days=jwt_expires_days,
        notifications_async=notifications_async,
        conn=conn,
    )
