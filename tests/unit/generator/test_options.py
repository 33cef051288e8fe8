"""
Tests for dialog categories and option resolution.

Covers:
- Category labels and option lists
- Initial dialog data (subtype starts on commoner jobs, no random type/CR)
- Type change: subtype label, subtype list, CR random only for class NPCs
- Selected option resolution (explicit, random, invalid)
"""

import random

import pytest

from npcgen.data.tables import CATEGORY_LIST, CLASSES, JOBS, RANDOM_VALUE
from npcgen.generator.models import DialogOption, InvalidSelectionError
from npcgen.generator.options import (
    change_dialog_category,
    dialog_data,
    get_dialog_categories,
    get_dialog_options,
    get_selected_option,
)


class TestDialogCategories:
    def test_categories_keep_order(self):
        categories = get_dialog_categories(CATEGORY_LIST)
        assert [c["value"] for c in categories] == CATEGORY_LIST

    def test_categories_have_labels(self):
        categories = {c["value"]: c["label"] for c in get_dialog_categories(CATEGORY_LIST)}
        assert categories["cr"] == "Challenge Rating"
        assert categories["race"] == "Race"


class TestDialogOptions:
    def test_random_option_prepended(self):
        options = get_dialog_options("race", True)
        assert options[0] == DialogOption(value=RANDOM_VALUE, label="Random")

    def test_no_random_option(self):
        options = get_dialog_options("race", False)
        assert all(o.value != RANDOM_VALUE for o in options)

    def test_npc_lists_classes(self):
        values = [o.value for o in get_dialog_options("npc", False)]
        assert values == list(CLASSES)

    def test_commoner_lists_jobs(self):
        values = [o.value for o in get_dialog_options("commoner", False)]
        assert values == list(JOBS)

    def test_cr_includes_fractions(self):
        values = [o.value for o in get_dialog_options("cr", False)]
        assert values[:4] == ["0", "1/8", "1/4", "1/2"]
        assert values[-1] == "30"

    def test_unknown_category_raises(self):
        with pytest.raises(KeyError):
            get_dialog_options("weather", False)


class TestDialogData:
    def test_subtype_starts_with_commoner_jobs(self):
        categories = {c.value: c for c in dialog_data(CATEGORY_LIST)}
        subtype_values = [o.value for o in categories["subtype"].option]
        assert subtype_values[0] == RANDOM_VALUE
        assert subtype_values[1:] == list(JOBS)

    def test_type_and_cr_have_no_random(self):
        categories = {c.value: c for c in dialog_data(CATEGORY_LIST)}
        for key in ("type", "cr"):
            assert all(o.value != RANDOM_VALUE for o in categories[key].option)

    def test_other_categories_offer_random(self):
        categories = {c.value: c for c in dialog_data(CATEGORY_LIST)}
        for key in ("race", "gender", "alignment"):
            assert categories[key].option[0].value == RANDOM_VALUE


class TestChangeDialogCategory:
    def test_npc_uses_class_label_and_random_cr(self):
        changed = change_dialog_category("npc")
        assert changed["subtype_label"] == "Class"
        assert changed["subtype"][0].value == RANDOM_VALUE
        assert "wizard" in [o.value for o in changed["subtype"]]
        assert changed["cr"][0].value == RANDOM_VALUE

    def test_commoner_uses_job_label_and_fixed_cr(self):
        changed = change_dialog_category("commoner")
        assert changed["subtype_label"] == "Job"
        assert "blacksmith" in [o.value for o in changed["subtype"]]
        assert all(o.value != RANDOM_VALUE for o in changed["cr"])

    def test_unknown_type_raises(self):
        with pytest.raises(InvalidSelectionError):
            change_dialog_category("dragon")


class TestGetSelectedOption:
    def test_explicit_value(self):
        options = get_dialog_options("race", True)
        selected = get_selected_option("race", "dwarf", options)
        assert selected == DialogOption(value="dwarf", label="Dwarf")

    def test_random_resolves_to_concrete_option(self):
        options = get_dialog_options("alignment", True)
        rng = random.Random(7)
        for _ in range(20):
            selected = get_selected_option("alignment", RANDOM_VALUE, options, rng)
            assert selected.value != RANDOM_VALUE
            assert selected in options

    def test_random_is_reproducible_with_seed(self):
        options = get_dialog_options("race", True)
        first = get_selected_option("race", RANDOM_VALUE, options, random.Random(42))
        second = get_selected_option("race", RANDOM_VALUE, options, random.Random(42))
        assert first == second

    def test_invalid_value_raises_with_choices(self):
        options = get_dialog_options("gender", True)
        with pytest.raises(InvalidSelectionError, match="Choose one of"):
            get_selected_option("gender", "robot", options)

    def test_empty_options_raise(self):
        with pytest.raises(InvalidSelectionError):
            get_selected_option("race", RANDOM_VALUE, [])
