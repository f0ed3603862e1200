from __future__ import annotations

from typing import Any

from sqlalchemy.sql import Select

from leadhub.platform.security.scope import SubmissionScope


class BaseRepository:
    resource = ""
    owner_column: Any = None

    def apply_scope_query(self, query: Select[Any], scope: SubmissionScope) -> Select[Any]:
        if self.owner_column is None:
            return query
        return query.where(scope.clause(self.owner_column))
