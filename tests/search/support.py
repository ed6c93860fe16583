from __future__ import annotations

from backend.apps.search.schema import Dashboard, Email, Number, String


class StubResource:
    """Resource exposing a fixed set of scope names; records run() calls."""

    def __init__(self, *scopes: str) -> None:
        self.scopes = set(scopes)
        self.calls = []

    def responds_to(self, name: str) -> bool:
        return name in self.scopes

    def run(self, result, limit=None, offset=0):
        self.calls.append((result, limit, offset))
        return []


MOCK_DASHBOARD = Dashboard(
    resource_name="users",
    table_name="users",
    attribute_types={"name": String, "email": Email, "phone": Number},
)

ARRAY_OF_SCOPES_DASHBOARD = Dashboard(
    resource_name="users",
    table_name="users",
    attribute_types={"name": String},
    collection_scopes=["active", "old", "with_argument(3)", "idle"],
)

HASH_OF_SCOPES_DASHBOARD = Dashboard(
    resource_name="users",
    table_name="users",
    attribute_types={"name": String},
    collection_scopes={
        "status": ["active", "inactive", "idle", "with_argument:*"],
        "other": ["last_week", "old", "with_argument(3)"],
    },
)

SCOPES_DISABLED_DASHBOARD = Dashboard(
    resource_name="users",
    table_name="users",
    attribute_types={"name": String},
    collection_scopes=[],
)
