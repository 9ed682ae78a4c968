"""Row-level scoping of resource queries by caller role.

``SCOPE_RULES`` is the single rule table. ``apply_scope`` turns a rule into a
SQL criterion for list/read queries, ``validate_scope`` evaluates the same rule
in Python against the looked-up rows of explicitly supplied target IDs. Both
paths must agree for every role and resource.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import false, true
from sqlalchemy.orm import Query, Session

from app.core.constants import Resource
from app.schemas.scope import ScopeCheck, ScopeContext, ScopeKind

logger = logging.getLogger(__name__)


class RowRule:
    """Decides which rows of a resource table a caller may see."""
    columns: Tuple[str, ...] = ()

    def criterion(self, model, context: ScopeContext):
        raise NotImplementedError

    def allows(self, row: Any, context: ScopeContext) -> bool:
        raise NotImplementedError


class Unrestricted(RowRule):
    def criterion(self, model, context):
        return true()

    def allows(self, row, context):
        return True


class Deny(RowRule):
    def criterion(self, model, context):
        return false()

    def allows(self, row, context):
        return False


class TemporaryBroadening(Unrestricted):
    """Grants every row until a finer rule can be expressed.

    Deliberately wider than the role's usual reach; ``reason`` names what is
    missing. Applied identically by both scoping paths.
    """

    def __init__(self, reason: str):
        self.reason = reason


class MatchCallerAttribute(RowRule):
    """Row column must equal an attribute of the caller (tenant_id, region_id, caller_id).

    A caller whose attribute is unset sees nothing.
    """

    def __init__(self, column: str, attribute: str):
        self.column = column
        self.attribute = attribute
        self.columns = (column,)

    def criterion(self, model, context):
        expected = getattr(context, self.attribute)
        if expected is None:
            return false()
        return getattr(model, self.column) == expected

    def allows(self, row, context):
        expected = getattr(context, self.attribute)
        if expected is None:
            return False
        return getattr(row, self.column) == expected


class PublicRows(RowRule):
    def __init__(self, column: str = "status", value: Any = "active"):
        self.column = column
        self.value = value
        self.columns = (column,)

    def criterion(self, model, context):
        return getattr(model, self.column) == self.value

    def allows(self, row, context):
        return getattr(row, self.column) == self.value


SCOPE_RULES: Dict[Resource, Dict[ScopeKind, RowRule]] = {
    Resource.USERS: {
        ScopeKind.GLOBAL: Unrestricted(),
        ScopeKind.REGION: MatchCallerAttribute("zone_id", "region_id"),
        ScopeKind.TENANT: MatchCallerAttribute("institute_id", "tenant_id"),
        ScopeKind.GUARDIAN: MatchCallerAttribute("parent_id", "caller_id"),
        ScopeKind.LEARNER: MatchCallerAttribute("id", "caller_id"),
    },
    Resource.INSTITUTES: {
        ScopeKind.GLOBAL: Unrestricted(),
        ScopeKind.REGION: MatchCallerAttribute("zone_id", "region_id"),
        ScopeKind.TENANT: MatchCallerAttribute("id", "tenant_id"),
    },
    Resource.VIDEOS: {
        ScopeKind.GLOBAL: Unrestricted(),
        ScopeKind.REGION: TemporaryBroadening("videos are not assigned to zones yet"),
        ScopeKind.TENANT: MatchCallerAttribute("institute_id", "tenant_id"),
        ScopeKind.GUARDIAN: PublicRows("status", "active"),
        ScopeKind.LEARNER: PublicRows("status", "active"),
    },
    Resource.ZONES: {
        ScopeKind.GLOBAL: Unrestricted(),
        ScopeKind.REGION: MatchCallerAttribute("id", "region_id"),
        ScopeKind.TENANT: MatchCallerAttribute("id", "region_id"),
    },
}

_DENY = Deny()


def rule_for(resource: Resource, context: ScopeContext) -> RowRule:
    rules = SCOPE_RULES.get(Resource(resource), {})
    return rules.get(context.capabilities.scope_kind, _DENY)


def scope_criterion(model, resource: Resource, context: ScopeContext):
    rule = rule_for(resource, context)
    if isinstance(rule, TemporaryBroadening):
        logger.debug(f"Temporarily broadened {resource.value} scope for {context.role} {context.caller_id}: {rule.reason}")
    elif isinstance(rule, Unrestricted):
        logger.debug(f"Scope bypass on {resource.value} for {context.role} {context.caller_id}")
    return rule.criterion(model, context)


def apply_scope(
    query: Query,
    model,
    resource: Resource,
    context: ScopeContext,
    extra_filters: Optional[Mapping[str, Any]] = None,
) -> Query:
    query = query.filter(scope_criterion(model, resource, context))

    for key, value in (extra_filters or {}).items():
        if value is None or value == "":
            continue
        column = getattr(model, key, None)
        if column is None:
            raise ValueError(f"Unknown filter column '{key}' for {resource.value}")
        query = query.filter(column == value)

    return query


def _dedupe(ids: Iterable[int]) -> List[int]:
    seen = set()
    ordered = []
    for target_id in ids:
        if target_id not in seen:
            seen.add(target_id)
            ordered.append(target_id)
    return ordered


def validate_scope(
    db: Session,
    model,
    resource: Resource,
    target_ids: Sequence[int],
    context: ScopeContext,
) -> ScopeCheck:
    ids = _dedupe(target_ids)
    rule = rule_for(resource, context)

    if context.is_super_admin:
        return ScopeCheck(valid_ids=ids, invalid_ids=[])

    if not ids:
        return ScopeCheck()

    lookup_columns = [model.id] + [getattr(model, name) for name in rule.columns if name != "id"]
    rows = {row.id: row for row in db.query(*lookup_columns).filter(model.id.in_(ids)).all()}

    valid_ids, invalid_ids = [], []
    for target_id in ids:
        row = rows.get(target_id)
        if row is not None and rule.allows(row, context):
            valid_ids.append(target_id)
        else:
            invalid_ids.append(target_id)

    if invalid_ids:
        logger.warning(
            f"Scope check rejected {len(invalid_ids)} {resource.value} id(s) for {context.role} {context.caller_id}"
        )
    return ScopeCheck(valid_ids=valid_ids, invalid_ids=invalid_ids)
