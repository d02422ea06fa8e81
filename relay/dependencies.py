from __future__ import annotations

from dataclasses import dataclass

from relay.core.config.settings import get_settings
from relay.modules.dashboard_auth.service import DashboardAuthService


@dataclass(slots=True)
class DashboardAuthContext:
    service: DashboardAuthService


def get_dashboard_auth_context() -> DashboardAuthContext:
    return DashboardAuthContext(service=DashboardAuthService(get_settings()))
