"""
Audience label resolution.

``target_audience`` / ``secondary_target_audience`` hold comma-separated
labels from a fixed vocabulary. Some vocabulary labels contain commas
themselves ("Family, Parents, Caregivers of ..."), so the raw parts are
re-assembled greedily: from each unconsumed part, the longest run of up to
six parts whose ", "-join is a known label wins; otherwise the single part
stands alone.

Each label is then resolved through the operator's memory
(``aud:<field>:<label>``, where SKIP drops the label), then the vocabulary;
anything else suspends with a mismatch offering the whole vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from resource_toolkit.core.memory import ResolutionMemory, audience_key
from resource_toolkit.core.results import MismatchOption, MismatchToken

PRIMARY_FIELD = "target_audience"
SECONDARY_FIELD = "secondary_target_audience"
AUDIENCE_FIELDS = (PRIMARY_FIELD, SECONDARY_FIELD)

MAX_LOOKAHEAD = 6

# Stored value => display label, shared by both audience fields.
AUDIENCE_CHOICES: Dict[str, str] = {
    "addiction_specialists": "Addiction Specialists",
    "administrators_in_community_health_organization": "Administrators in Community Health Organization",
    "community_health_workers": "Community Health Workers",
    "counselors_mental_health_workers_social_workers": "Counselors/Mental Health Workers/Social Workers",
    "dentists": "Dentists",
    "education-related_professionals": "Education-Related Professionals",
    "emts_firefighters_non-police_first_responders": "EMTs/Firefighters/Non-Police First Responders",
    "faith-based_professionals": "Faith-Based Professionals",
    "family_parents_caregivers_of_people_experiencing_substance_use_disorder": (
        "Family, Parents, Caregivers of People Experiencing Substance Use Disorder"
    ),
    "general_population": "General Population",
    "health_care_administrators": "Health Care Administrators",
    "justice-related_professionals": "Justice-Related Professionals",
    "local_government_staff": "Local Government Staff",
    "nurses_nurse_practitioners": "Nurses/Nurse Practitioners",
    "peer_specialists": "Peer Specialists",
    "physicians": "Physicians",
    "physician_assistants": "Physician Assistants",
    "prevention_professionals": "Prevention Professionals",
    "psychologists": "Psychologists",
    "students": "Students",
    "volunteers": "Volunteers",
}


def label_to_value(choices: Mapping[str, str] = AUDIENCE_CHOICES) -> Dict[str, str]:
    return {label: value for value, label in choices.items()}


def split_labels(raw: str, vocabulary: Mapping[str, str], max_lookahead: int = MAX_LOOKAHEAD) -> List[str]:
    """
    Split ``raw`` on commas, re-joining runs that form a known label.

    >>> split_labels("Physicians, Family, Parents, Caregivers of People "
    ...              "Experiencing Substance Use Disorder", label_to_value())
    ['Physicians', 'Family, Parents, Caregivers of People Experiencing Substance Use Disorder']
    """
    raw = (raw or "").strip()
    if not raw:
        return []

    parts = [p.strip() for p in raw.split(",")]
    labels: List[str] = []
    idx = 0
    while idx < len(parts):
        for lookahead in range(min(max_lookahead, len(parts) - idx), 0, -1):
            candidate = ", ".join(parts[idx:idx + lookahead])
            if candidate in vocabulary:
                labels.append(candidate)
                idx += lookahead
                break
        else:
            labels.append(parts[idx])
            idx += 1
    return labels


@dataclass
class AudienceResolution:
    # None means the raw field was empty: leave the stored field untouched.
    values: Optional[List[str]] = None
    mismatch: Optional[MismatchToken] = None
    skipped: List[str] = field(default_factory=list)


def vocabulary_options(choices: Mapping[str, str] = AUDIENCE_CHOICES) -> List[MismatchOption]:
    return [MismatchOption(value=value, label=label) for value, label in choices.items()]


def resolve_audience(
    raw: str,
    field_name: str,
    memory: ResolutionMemory,
    context: str,
    choices: Mapping[str, str] = AUDIENCE_CHOICES,
) -> AudienceResolution:
    vocabulary = label_to_value(choices)
    labels = split_labels(raw, vocabulary)
    if not labels:
        return AudienceResolution(values=None)

    result = AudienceResolution(values=[])
    for label in labels:
        key = audience_key(field_name, label)

        if key in memory:
            if memory.is_skip(key):
                result.skipped.append(label)
            else:
                result.values.append(memory[key])
            continue

        if label in vocabulary:
            result.values.append(vocabulary[label])
            continue

        result.mismatch = MismatchToken(
            mapping_key=key,
            csv_value=label,
            context=context,
            options=vocabulary_options(choices),
        )
        return result

    return result
