"""
Taxonomy & audience assigner.

Assigns resource-category terms (up to three paths, four levels deep) and
the two audience fields to existing resources matched by ``Resource ID``.

A step runs in two phases:

  1. resolve every row of the batch against a fresh term forest and the
     operator's memory; the first unknown label suspends the step and is
     returned together with the counters/log gathered so far
  2. only when the whole batch resolved, apply the plans (live mode)

so a suspended step never leaves half-applied mutations behind and the
replay after a resolution applies each row exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from resource_toolkit.core.exceptions import RowError
from resource_toolkit.core.memory import ResolutionMemory
from resource_toolkit.core.results import BatchResult, Mode
from resource_toolkit.loader import Row, cell
from resource_toolkit.logging import get_logger
from resource_toolkit.store.interfaces import RESOURCE_CATEGORY, RecordStore, TermSource
from resource_toolkit.taxonomy import (
    AUDIENCE_CHOICES,
    PRIMARY_FIELD,
    SECONDARY_FIELD,
    TermForest,
    resolve_audience,
    resolve_row_categories,
)

log = get_logger("taxonomy_assigner")

RESOURCE_ID = "Resource ID"
STATUS_FIELD = "resource_status"
ACTIVE = "active"

COUNTERS = ["updated", "not_found", "terms_assigned", "terms_skipped", "errors"]


@dataclass
class RowPlan:
    row_num: int
    record_id: int
    title: str
    term_ids: List[int] = field(default_factory=list)
    audiences: Dict[str, Optional[List[str]]] = field(default_factory=dict)

    def summary(self) -> str:
        parts = []
        if self.term_ids:
            parts.append(f"{len(self.term_ids)} category term(s)")
        if self.audiences.get(PRIMARY_FIELD):
            parts.append(f"{len(self.audiences[PRIMARY_FIELD])} primary audience(s)")
        if self.audiences.get(SECONDARY_FIELD):
            parts.append(f"{len(self.audiences[SECONDARY_FIELD])} secondary audience(s)")
        return ", ".join(parts) + ", status → active" if parts else "no changes"


class TaxonomyAssigner:
    kind = "taxonomy"
    required_columns = (RESOURCE_ID,)

    def __init__(
        self,
        store: RecordStore,
        terms: TermSource,
        batch_size: int = 10,
        taxonomy: str = RESOURCE_CATEGORY,
        audience_choices: Mapping[str, str] = AUDIENCE_CHOICES,
    ):
        self.store = store
        self.terms = terms
        self.batch_size = batch_size
        self.taxonomy = taxonomy
        self.audience_choices = audience_choices

    # -------------------------------------------------------------------------
    # Phase 1: resolution
    # -------------------------------------------------------------------------

    def _plan_row(
        self,
        row: Row,
        row_num: int,
        record_id: int,
        resource_id: str,
        forest: TermForest,
        memory: ResolutionMemory,
        result: BatchResult,
    ) -> Optional[RowPlan]:
        title = self.store.get_title(record_id)
        plan = RowPlan(row_num=row_num, record_id=record_id, title=title)

        def describe(path_number: int, depth: int) -> str:
            return (
                f'Row {row_num}, Resource ID {resource_id} "{title}" - '
                f"Category {path_number}, Level {depth + 1}"
            )

        categories = resolve_row_categories(row, forest, memory, describe)
        result.bump("terms_assigned", categories.assigned)
        result.bump("terms_skipped", categories.skipped)
        if categories.mismatch is not None:
            result.suspend(categories.mismatch)
            return None
        plan.term_ids = categories.term_ids

        for field_name in (PRIMARY_FIELD, SECONDARY_FIELD):
            audience = resolve_audience(
                cell(row, field_name),
                field_name,
                memory,
                context=f"Row {row_num} - {field_name}",
                choices=self.audience_choices,
            )
            if audience.mismatch is not None:
                result.suspend(audience.mismatch)
                return None
            plan.audiences[field_name] = audience.values

        if log.isEnabledFor(logging.DEBUG):
            for term_id in plan.term_ids:
                trail = " > ".join(t.name for t in forest.path(term_id))
                log.debug("Row %d: category %s (#%d)", row_num, trail, term_id)
        return plan

    # -------------------------------------------------------------------------
    # Phase 2: mutation
    # -------------------------------------------------------------------------

    def _apply(self, plan: RowPlan) -> None:
        if plan.term_ids:
            self.store.set_terms(plan.record_id, plan.term_ids, self.taxonomy)

        values = {name: v for name, v in plan.audiences.items() if v is not None}
        values[STATUS_FIELD] = ACTIVE
        self.store.set_fields(plan.record_id, values)

    def _report(self, plan: RowPlan, verb: str, result: BatchResult) -> None:
        result.ok(f'Row {plan.row_num}: {verb} post #{plan.record_id} "{plan.title}" - {plan.summary()}')
        result.bump("updated")

    # -------------------------------------------------------------------------
    # Batch entry point
    # -------------------------------------------------------------------------

    def process(self, rows: List[Row], offset: int, mode: Mode, memory: ResolutionMemory) -> BatchResult:
        result = BatchResult.begin(mode, offset, COUNTERS)

        resource_ids = {cell(r, RESOURCE_ID) for r in rows} - {""}
        id_map = self.store.find_by_external_id(sorted(resource_ids)) if resource_ids else {}
        forest = TermForest(self.terms.load_terms(self.taxonomy))

        plans: List[RowPlan] = []
        for i, row in enumerate(rows):
            row_num = offset + i + 2
            resource_id = cell(row, RESOURCE_ID)

            if not resource_id:
                result.skip(f"Row {row_num}: No Resource ID.")
                result.bump("errors")
                continue

            record_id = id_map.get(resource_id)
            if record_id is None:
                result.error(f"Row {row_num}: Resource ID {resource_id} not found.")
                result.bump("not_found")
                continue

            plan = self._plan_row(row, row_num, record_id, resource_id, forest, memory, result)
            if plan is None:
                # Nothing is written for a suspended batch; rows resolved so
                # far are reported and written when the batch is replayed.
                pending = "Ready to update" if mode.is_live else "Would update"
                for resolved in plans:
                    self._report(resolved, pending, result)
                return result
            plans.append(plan)

        verb = "Updated" if mode.is_live else "Would update"
        for plan in plans:
            if mode.is_live:
                try:
                    self._apply(plan)
                except RowError as exc:
                    result.error(f"Row {plan.row_num}: ERROR updating post #{plan.record_id} - {exc}")
                    result.bump("errors")
                    continue
            self._report(plan, verb, result)

        return result
