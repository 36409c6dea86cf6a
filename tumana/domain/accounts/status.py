from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

DASHBOARD_PATHS: dict[str, str] = {
    "customer": "/api/customers/dashboard",
    "seller": "/api/sellers/dashboard",
    "worker": "/api/workers/dashboard",
    "employer": "/api/employers/dashboard",
}


class RegistrationState(str, Enum):
    UNREGISTERED = "unregistered"
    PENDING = "pending"
    DECLINED = "declined"
    VERIFIED = "verified"


# The dashboards answer with these codes instead of a state field.
_STATUS_CODE_STATES: dict[int, RegistrationState] = {
    404: RegistrationState.UNREGISTERED,
    403: RegistrationState.PENDING,
    410: RegistrationState.DECLINED,
}

_STATE_MESSAGES: dict[RegistrationState, str] = {
    RegistrationState.UNREGISTERED: "You haven't registered as a {role} yet. Submit an application to begin.",
    RegistrationState.PENDING: "Your {role} application is still under review.",
    RegistrationState.DECLINED: "Your {role} application was declined. You may submit a new application.",
    RegistrationState.VERIFIED: "Your {role} account is verified.",
}


def state_for_status_code(status_code: int) -> RegistrationState | None:
    if 200 <= status_code < 300:
        return RegistrationState.VERIFIED
    return _STATUS_CODE_STATES.get(status_code)


@dataclass(frozen=True)
class RegistrationStatus:
    role: str
    state: RegistrationState
    profile: dict[str, Any] | None = None

    @property
    def message(self) -> str:
        return _STATE_MESSAGES[self.state].format(role=self.role)

    @property
    def can_access_dashboard(self) -> bool:
        return self.state is RegistrationState.VERIFIED

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "state": self.state.value,
            "message": self.message,
            "profile": self.profile,
        }
