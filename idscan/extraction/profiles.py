"""Per-document-type profiles: region plan plus field rule set.

The classifier's verdict selects exactly one profile, which then drives
the remainder of the run: which regions are recognized, with what
enhancement, and which rules turn their text into fields.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial

from idscan.models import DISPLAY_NAMES, DocumentType, ExtractedRecord
from idscan.utils.config import AppConfig, ExtractionConfig, RegionSpec

from . import field_rules
from .rule_engine import Rule, RuleChain, RuleEngine


@dataclass(frozen=True)
class DocumentProfile:
    """Everything type-specific about scanning one kind of document."""

    doc_type: DocumentType
    display_name: str
    regions: tuple[RegionSpec, ...]
    engine: RuleEngine

    @property
    def field_names(self) -> tuple[str, ...]:
        return self.engine.field_names

    @property
    def region_labels(self) -> tuple[str, ...]:
        return tuple(spec.label for spec in self.regions)

    def build_record(self, texts: Mapping[str, str]) -> ExtractedRecord:
        """Run the profile's rules and assemble the record.

        Args:
            texts: Recognized text keyed by region label.

        Returns:
            A record whose unresolved fields hold the sentinel.
        """
        matches = self.engine.run(texts)
        return ExtractedRecord(
            doc_type=self.display_name,
            raw_texts={label: texts.get(label, "") for label in self.region_labels},
            **{name: match.value for name, match in matches.items()},
        )


def _name_kwargs(config: ExtractionConfig) -> dict[str, object]:
    return {
        "blacklist": tuple(term.lower() for term in config.name_blacklist),
        "min_length": config.min_name_length,
        "max_length": config.max_name_length,
    }


def _dob_rules(config: ExtractionConfig, sources: tuple[str, ...]) -> tuple[Rule, ...]:
    years = {"min_year": config.min_birth_year, "max_year": config.max_birth_year}
    return (
        Rule("labelled_dob", partial(field_rules.labelled_dob, **years), sources),
        Rule(
            "tamil_labelled_dob",
            partial(field_rules.tamil_labelled_dob, **years),
            sources,
        ),
        Rule("any_date_line", partial(field_rules.any_date_line, **years), sources),
    )


def aadhaar_chains(
    config: ExtractionConfig, regions: tuple[RegionSpec, ...]
) -> tuple[RuleChain, ...]:
    """Rule chains for an Aadhaar card.

    The first region carries name, date of birth, and gender; the second
    carries the 12-digit number.
    """
    details, number = regions[0].label, regions[-1].label
    name = partial(field_rules.first_name_line, **_name_kwargs(config))
    return (
        RuleChain("name", (Rule("first_name_line", name, (details,)),)),
        RuleChain("dob", _dob_rules(config, (details,))),
        RuleChain("gender", (Rule("gender", field_rules.gender, (details,)),)),
        RuleChain(
            "aadhaar",
            (Rule("aadhaar_number", field_rules.aadhaar_number, (number,)),),
        ),
    )


def voter_chains(
    config: ExtractionConfig, regions: tuple[RegionSpec, ...]
) -> tuple[RuleChain, ...]:
    """Rule chains for a Voter ID card.

    Both passes are concatenated for most fields. Gender prefers the
    enhanced pass, which reads the small gender line more reliably.
    """
    labels = tuple(spec.label for spec in regions)
    plain = tuple(spec.label for spec in regions if not spec.is_enhanced) or labels[:1]
    enhanced = tuple(spec.label for spec in regions if spec.is_enhanced) or labels[-1:]
    below_label = partial(field_rules.father_name_below_label, **_name_kwargs(config))
    return (
        RuleChain(
            "card_no",
            (Rule("voter_card_number", field_rules.voter_card_number, labels),),
        ),
        RuleChain("name", (Rule("labelled_name", field_rules.labelled_name, labels),)),
        RuleChain(
            "father_name",
            (
                Rule("labelled_father_name", field_rules.labelled_father_name, labels),
                Rule("father_name_below_label", below_label, labels),
            ),
        ),
        RuleChain(
            "gender",
            (
                Rule("gender_enhanced", field_rules.gender, enhanced),
                Rule("gender_plain", field_rules.gender, plain),
            ),
        ),
        RuleChain("dob", _dob_rules(config, labels)),
    )


def select_profile(doc_type: DocumentType, config: AppConfig) -> DocumentProfile:
    """Look up the profile for a document type.

    ``UNKNOWN`` documents are scanned with the Aadhaar profile, the
    layout most uploads follow.

    Args:
        doc_type: Classifier verdict.
        config: Application configuration holding the region plans.

    Returns:
        The profile that governs the rest of the run.
    """
    if doc_type is DocumentType.VOTER:
        regions = tuple(config.regions.voter)
        chains = voter_chains(config.extraction, regions)
        display = DISPLAY_NAMES[DocumentType.VOTER]
    else:
        regions = tuple(config.regions.aadhaar)
        chains = aadhaar_chains(config.extraction, regions)
        display = DISPLAY_NAMES[DocumentType.AADHAAR]
    return DocumentProfile(
        doc_type=doc_type,
        display_name=display,
        regions=regions,
        engine=RuleEngine(chains),
    )
