from square_admin.client.sqr_square_client import (
    AdmGroupClient,
    AdmUserClient,
    ApiClient,
    AuthClient,
    SqrRoleClient,
    SqrSquareClient,
)
from square_admin.client.stores import (
    AdmGroupStore,
    AdmUserGroupStore,
    AdmUserStore,
    SqrSquareRoleStore,
    SqrSquareStore,
    SqrSquareTeamStore,
    SqrTimerStore,
)

__all__ = [
    "AdmGroupClient",
    "AdmGroupStore",
    "AdmUserClient",
    "AdmUserGroupStore",
    "AdmUserStore",
    "ApiClient",
    "AuthClient",
    "SqrRoleClient",
    "SqrSquareClient",
    "SqrSquareRoleStore",
    "SqrSquareStore",
    "SqrSquareTeamStore",
    "SqrTimerStore",
]
