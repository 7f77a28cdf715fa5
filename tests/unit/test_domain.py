"""Tests for translation maps, key identity and the diff/merge value objects."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from l10n_branching.domain import (
    Branch,
    BranchDiffResult,
    BranchRef,
    ChangeKind,
    ConflictEntry,
    DiffEntry,
    KeyWithTranslations,
    MergeRequest,
    MergeResult,
    Resolution,
    ResolutionChoice,
    TranslationValue,
    format_key,
    key_identity,
    to_translation_map,
    translations_equal,
)

# ── Translation maps ─────────────────────────────────────────────


def test_translations_equal_same_languages_and_values() -> None:
    assert translations_equal({"en": "Hi", "de": "Hallo"}, {"de": "Hallo", "en": "Hi"})


def test_translations_equal_different_value() -> None:
    assert not translations_equal({"en": "Hi"}, {"en": "Hello"})


def test_translations_equal_extra_language_is_a_difference() -> None:
    assert not translations_equal({"en": "Hi"}, {"en": "Hi", "de": "Hallo"})
    assert not translations_equal({"en": "Hi", "de": "Hallo"}, {"en": "Hi"})


def test_translations_equal_same_size_different_languages() -> None:
    assert not translations_equal({"en": "Hi"}, {"de": "Hi"})


def test_translations_equal_empty_maps() -> None:
    assert translations_equal({}, {})


def test_to_translation_map_projects_rows() -> None:
    rows = [
        TranslationValue(language="en", value="Hi"),
        TranslationValue(language="fr", value="Salut"),
    ]
    assert to_translation_map(rows) == {"en": "Hi", "fr": "Salut"}


# ── Key identity ─────────────────────────────────────────────────


def test_key_identity_normalises_empty_namespace() -> None:
    assert key_identity("greet") == (None, "greet")
    assert key_identity("greet", "") == (None, "greet")
    assert key_identity("greet", "common") == ("common", "greet")


def test_format_key() -> None:
    assert format_key("greet") == "greet"
    assert format_key("greet", "common") == "common:greet"


def test_key_with_translations_map_and_identity() -> None:
    key = KeyWithTranslations(
        id="k1",
        name="greet",
        namespace="common",
        translations=[TranslationValue(language="en", value="Hi")],
    )
    assert key.identity == ("common", "greet")
    assert key.translation_map() == {"en": "Hi"}


# ── Branch lineage ───────────────────────────────────────────────


def test_branch_is_child_of_direct_parent_only() -> None:
    main = Branch(id="b1", name="main", space_id="s")
    feature = Branch(id="b2", name="feature", space_id="s", source_branch_id="b1")
    nested = Branch(id="b3", name="nested", space_id="s", source_branch_id="b2")

    assert feature.is_child_of(main)
    assert not main.is_child_of(feature)
    assert not nested.is_child_of(main)


def test_branch_is_immutable() -> None:
    branch = Branch(id="b1", name="main", space_id="s")
    with pytest.raises(PydanticValidationError):
        branch.name = "other"  # type: ignore[misc]


# ── Resolutions ──────────────────────────────────────────────────


def test_resolution_keep_source() -> None:
    resolution = Resolution(key="greet", resolution="source")
    assert resolution.choice is ResolutionChoice.SOURCE
    assert resolution.identity == (None, "greet")


def test_resolution_keep_target() -> None:
    assert Resolution(key="greet", resolution="target").choice is ResolutionChoice.TARGET


def test_resolution_custom_map() -> None:
    resolution = Resolution(key="greet", namespace="ui", resolution={"en": "Howdy"})
    assert resolution.choice is None
    assert resolution.resolution == {"en": "Howdy"}
    assert resolution.label == "ui:greet"


def test_resolution_rejects_unknown_choice() -> None:
    with pytest.raises(PydanticValidationError):
        Resolution(key="greet", resolution="both")  # type: ignore[arg-type]


def test_merge_request_from_json_payload() -> None:
    request = MergeRequest.model_validate(
        {
            "target_branch_id": "b1",
            "resolutions": [
                {"key": "greet", "resolution": "source"},
                {"key": "bye", "resolution": {"en": "Bye"}},
            ],
        }
    )
    assert request.resolutions[0].choice is ResolutionChoice.SOURCE
    assert request.resolutions[1].resolution == {"en": "Bye"}


# ── BranchDiffResult ─────────────────────────────────────────────


def _diff() -> BranchDiffResult:
    return BranchDiffResult(
        source=BranchRef(id="b2", name="feature"),
        target=BranchRef(id="b1", name="main"),
        added=[DiffEntry(key="farewell", translations={"en": "Bye"})],
        conflicts=[
            ConflictEntry(
                key="greet", namespace="ui", source={"en": "Hey"}, target={"en": "Hello"}
            )
        ],
    )


def test_diff_result_summary_and_flags() -> None:
    diff = _diff()
    assert diff.summary() == {"added": 1, "modified": 0, "deleted": 0, "conflict": 1}
    assert diff.has_conflicts
    assert not diff.is_empty


def test_diff_result_classify() -> None:
    diff = _diff()
    assert diff.classify("farewell") is ChangeKind.ADDED
    assert diff.classify("greet", "ui") is ChangeKind.CONFLICT
    assert diff.classify("greet") is ChangeKind.UNCHANGED


def test_empty_diff_result() -> None:
    diff = BranchDiffResult(
        source=BranchRef(id="a", name="a"), target=BranchRef(id="b", name="b")
    )
    assert diff.is_empty
    assert not diff.has_conflicts


def test_diff_result_serialises_to_json() -> None:
    payload = _diff().model_dump(mode="json")
    assert payload["added"][0] == {
        "key": "farewell",
        "namespace": None,
        "translations": {"en": "Bye"},
    }
    assert payload["conflicts"][0]["target"] == {"en": "Hello"}


def test_merge_result_defaults() -> None:
    result = MergeResult(success=True)
    assert result.merged == 0
    assert result.conflicts is None
