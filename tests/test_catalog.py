import pytest
from pydantic import ValidationError

from n7_runbook.catalog.catalog import StepCatalog, load_catalog
from n7_runbook.errors import CatalogError, UnknownStepError
from n7_runbook.schemas.step import Category, StepDefinition


def test_bundled_catalog_loads():
    catalog = load_catalog()

    assert len(catalog) == 25
    assert len(set(catalog.ids)) == len(catalog)
    assert catalog[0].id == "declare-incident"
    assert catalog[len(catalog) - 1].id == "notify-compliance"
    assert {step.category for step in catalog} == set(Category)


def test_bundled_catalog_keeps_annexes():
    catalog = load_catalog()

    preserve = catalog[catalog.index_of("preserve-logs")]
    assert preserve.critical is True
    assert preserve.commands[0].label == "S3 Object Lock (example)"
    assert [link.label for link in preserve.links] == ["AWS CloudTrail", "S3 Object Lock"]

    guardduty = catalog[catalog.index_of("review-guardduty")]
    assert guardduty.commands[0].label is None
    assert guardduty.commands[0].cmd.startswith("aws guardduty list-findings")


def test_catalog_order_groups_categories():
    catalog = load_catalog()
    order = list(Category)
    positions = [order.index(step.category) for step in catalog]
    assert positions == sorted(positions)


def test_duplicate_ids_rejected():
    step = StepDefinition(id="dup", title="A", category=Category.TRIAGE)
    with pytest.raises(CatalogError):
        StepCatalog([step, step])


def test_index_of_unknown_step(catalog):
    assert catalog.index_of("rotate-keys") == 1
    assert "rotate-keys" in catalog
    assert "nope" not in catalog
    with pytest.raises(UnknownStepError):
        catalog.index_of("nope")


def test_step_definition_is_immutable(catalog):
    with pytest.raises(ValidationError):
        catalog[0].title = "changed"


def test_load_catalog_from_custom_file(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(
        "- id: one\n"
        "  title: First\n"
        "  category: Triage\n"
        "- id: two\n"
        "  title: Second\n"
        "  category: Recovery\n"
        "  critical: true\n"
    )

    catalog = load_catalog(path)

    assert catalog.ids == ("one", "two")
    assert catalog[catalog.index_of("two")].critical is True
    assert catalog[catalog.index_of("one")].details == ""


@pytest.mark.parametrize("content", [
    "not: a list\n",
    "- id: one\n  title: First\n  category: Lunch\n",
    "- title: Missing id\n  category: Triage\n",
    "- id: one\n  title: First\n  category: Triage\n- id: one\n  title: Again\n  category: Triage\n",
    "- [unbalanced\n",
])
def test_malformed_catalog_raises(tmp_path, content):
    path = tmp_path / "broken.yaml"
    path.write_text(content)
    with pytest.raises(CatalogError):
        load_catalog(path)


def test_missing_catalog_file_raises(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "absent.yaml")
