# tests/test_taxonomy.py

from __future__ import annotations

from resource_toolkit.core.memory import SKIP, ResolutionMemory
from resource_toolkit.taxonomy import (
    AUDIENCE_CHOICES,
    PRIMARY_FIELD,
    PathState,
    TermForest,
    TermNode,
    category_column,
    label_to_value,
    path_levels,
    resolve_audience,
    resolve_path,
    resolve_row_categories,
    split_labels,
)


def _forest():
    return TermForest(
        [
            TermNode(1, "Health"),
            TermNode(2, "Education"),
            TermNode(3, "Mental Health", 1),
            TermNode(4, "Addiction", 1),
            TermNode(5, "adolescents", 3),
        ]
    )


def _describe(path_number, depth):
    return f"Category {path_number}, Level {depth + 1}"


def test_forest_lookup_and_options():
    forest = _forest()
    assert forest.find("  health ", 0).id == 1
    assert forest.find("Health", 2) is None
    assert [o.label for o in forest.sibling_options(1)] == ["Addiction", "Mental Health"]
    assert [o.value for o in forest.sibling_options(1)] == ["4", "3"]
    assert [t.name for t in forest.path(5)] == ["Health", "Mental Health", "adolescents"]


def test_path_levels_stop_at_first_empty():
    row = {
        category_column(1, 0): "Health",
        category_column(1, 1): "",
        category_column(1, 2): "ignored",
    }
    assert path_levels(row, 1) == ["Health"]
    assert category_column(2, 3) == "Resource Category 2 - Sub Sub Sub Category"


def test_resolve_path_records_deepest_term():
    outcome = resolve_path(1, ["HEALTH", "mental health", "Adolescents"], _forest(), ResolutionMemory(), _describe)
    assert outcome.state is PathState.RESOLVED
    assert outcome.term_id == 5


def test_resolve_path_suspends_with_children_of_parent():
    outcome = resolve_path(1, ["Health", "Nutrition"], _forest(), ResolutionMemory(), _describe)
    assert outcome.state is PathState.SUSPENDED
    token = outcome.mismatch
    assert token.mapping_key == "tax:1:Nutrition"
    assert token.csv_value == "Nutrition"
    assert token.context == "Category 1, Level 2"
    assert [o.label for o in token.options] == ["Addiction", "Mental Health"]


def test_resolve_path_uses_memory_and_skip():
    memory = ResolutionMemory({"tax:1:Nutrition": "4"})
    outcome = resolve_path(1, ["Health", "Nutrition"], _forest(), memory, _describe)
    assert outcome.term_id == 4

    # the remembered id becomes the parent of the next level
    memory = ResolutionMemory({"tax:0:Wellness": "1"})
    outcome = resolve_path(1, ["Wellness", "Addiction"], _forest(), memory, _describe)
    assert outcome.term_id == 4

    skipped = resolve_path(1, ["Health", "Nutrition"], _forest(), ResolutionMemory({"tax:1:Nutrition": SKIP}), _describe)
    assert skipped.state is PathState.SKIPPED


def test_resolver_is_idempotent():
    row = {category_column(1, 0): "Health", category_column(1, 1): "Nutrition"}
    memory = ResolutionMemory({"tax:1:Nutrition": "3"})

    first = resolve_row_categories(row, _forest(), memory, _describe)
    second = resolve_row_categories(row, _forest(), memory, _describe)
    assert first.term_ids == second.term_ids == [3]
    assert first.mismatch is None and second.mismatch is None


def test_row_categories_counts_paths():
    row = {
        category_column(1, 0): "Health",
        category_column(2, 0): "Unknown",
        category_column(3, 0): "Education",
    }
    memory = ResolutionMemory({"tax:0:Unknown": SKIP})
    out = resolve_row_categories(row, _forest(), memory, _describe)
    assert out.term_ids == [1, 2]
    assert out.assigned == 2
    assert out.skipped == 1


def test_audience_vocabulary_has_21_entries():
    assert len(AUDIENCE_CHOICES) == 21


def test_split_compound_label():
    raw = "Physicians, Family, Parents, Caregivers of People Experiencing Substance Use Disorder"
    assert split_labels(raw, label_to_value()) == [
        "Physicians",
        "Family, Parents, Caregivers of People Experiencing Substance Use Disorder",
    ]


def test_split_unknown_parts_stand_alone():
    assert split_labels("Students, Aliens ,Volunteers", label_to_value()) == ["Students", "Aliens", "Volunteers"]
    assert split_labels("   ", label_to_value()) == []


def test_resolve_audience_values_and_empty():
    res = resolve_audience("Physicians, Students", PRIMARY_FIELD, ResolutionMemory(), "ctx")
    assert res.values == ["physicians", "students"]
    assert res.mismatch is None

    assert resolve_audience("", PRIMARY_FIELD, ResolutionMemory(), "ctx").values is None


def test_resolve_audience_mismatch_offers_full_vocabulary():
    res = resolve_audience("Physicians, Doctors", PRIMARY_FIELD, ResolutionMemory(), "Row 2 - target_audience")
    token = res.mismatch
    assert token.mapping_key == "aud:target_audience:Doctors"
    assert token.context == "Row 2 - target_audience"
    assert [o.value for o in token.options] == list(AUDIENCE_CHOICES)


def test_resolve_audience_memory():
    memory = ResolutionMemory({"aud:target_audience:Doctors": "physicians", "aud:target_audience:Aliens": SKIP})
    res = resolve_audience("Doctors, Aliens, Students", PRIMARY_FIELD, memory, "ctx")
    assert res.values == ["physicians", "students"]
    assert res.skipped == ["Aliens"]
