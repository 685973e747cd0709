# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0

import datetime
import io
import math
import re

import pytest
import yaml

from autovalidate import decl, inference, schema
from autovalidate.inference import LengthRange, RuleKind

from .conftest import Schemas  # type: ignore


@pytest.fixture
def shop() -> dict[str, type[schema.Model]]:
    return decl.load(Schemas.shop)


def test_all_declared_models_are_created(shop):
    assert list(shop) == ["Customer", "Product", "Legacy"]
    assert all(issubclass(i, schema.Model) for i in shop.values())


def test_declared_properties_have_the_requested_types(shop):
    props = shop["Product"].__properties__

    assert isinstance(props["sku"], schema.String)
    assert isinstance(props["stock"], schema.Integer)
    assert props["rating"].primitive is float
    assert props["released"].primitive is datetime.date
    assert props["payload"].custom


def test_rules_are_inferred_for_declared_models(shop):
    rules = shop["Customer"].__rules__

    assert rules.kinds_for("id") == [RuleKind.NUMERICALITY]
    assert rules.kinds_for("email") == [
        RuleKind.PRESENCE,
        RuleKind.LENGTH,
        RuleKind.FORMAT,
        RuleKind.UNIQUENESS,
        RuleKind.PRIMITIVE_TYPE,
    ]
    assert rules.kinds_for("newsletter") == [RuleKind.PRIMITIVE_TYPE]
    (presence,) = rules.by_kind(RuleKind.PRESENCE)
    assert presence.options.message == "Please enter an email address"


def test_range_tag_creates_a_length_range(shop):
    rules = shop["Customer"].__rules__.by_property("nickname")

    (length,) = rules.by_kind(RuleKind.LENGTH)
    assert length.options.within == LengthRange(3, 20)
    (unique,) = rules.by_kind(RuleKind.UNIQUENESS)
    assert unique.options.scope == ("shop",)


def test_regex_tag_creates_a_compiled_pattern(shop):
    rules = shop["Customer"].__rules__.by_property("handle")

    (fmt,) = rules.by_kind(RuleKind.FORMAT)
    assert isinstance(fmt.options.with_, re.Pattern)
    assert fmt.options.with_.pattern == "^[a-z_]+$"


def test_numeric_options_are_carried_over(shop):
    rules = shop["Product"].__rules__

    (stock,) = rules.by_property("stock")
    assert stock.options.integer_only is True
    assert stock.options.gte == 0
    (rating,) = rules.by_property("rating")
    assert rating.options.lte == 5
    assert rating.options.integer_only is None
    assert rules.kinds_for("payload") == [RuleKind.PRESENCE]


def test_validation_context_is_read_from_the_schema(shop):
    rules = shop["Product"].__rules__.by_property("sku")

    assert len(rules) == 3
    assert {i.options.context for i in rules} == {"import"}


def test_models_can_opt_out_in_the_schema(shop):
    assert shop["Legacy"].__rules__ == []


def test_unbounded_range_in_schema_raises():
    with pytest.raises(decl.SchemaError) as excinfo:
        decl.load(Schemas.unbounded)

    (error,) = excinfo.value.errors.values()
    assert isinstance(error, inference.InvalidLengthRangeError)
    assert "Infinity is not a valid upper bound" in str(excinfo.value)


def test_unbounded_range_does_not_stop_other_models():
    document = (
        "models:\n"
        "  Note:\n    properties:\n"
        "      text: {type: String, length: !range 1..inf}\n"
        "  Good:\n    properties:\n"
        "      title: {type: String, required: true}\n"
        "  Page:\n    properties:\n      body: {type: Text, length: .inf}\n"
    )

    with pytest.raises(decl.SchemaError) as excinfo:
        decl.load(io.StringIO(document))

    assert list(excinfo.value.errors) == ["Note", "Page"]
    assert excinfo.value.errors["Page"].property_name == "body"
    assert list(excinfo.value.models) == ["Good"]
    good = excinfo.value.models["Good"]
    assert good.__rules__.kinds_for("title") == [
        RuleKind.PRESENCE,
        RuleKind.LENGTH,
        RuleKind.PRIMITIVE_TYPE,
    ]
    assert "Cannot infer validations for 2 model(s)" in str(excinfo.value)


def test_list_lengths_are_read_as_ranges():
    document = (
        "models:\n  Tag:\n    properties:\n"
        "      label: {type: String, length: [2, 8]}\n"
    )

    models = decl.load(io.StringIO(document))

    rules = models["Tag"].__rules__.by_kind(RuleKind.LENGTH)
    assert rules[0].options.within == LengthRange(2, 8)


def test_load_accepts_open_files():
    file = io.StringIO("models:\n  Tag:\n    properties:\n      label: {}\n")

    models = decl.load(file)

    assert list(models["Tag"].__properties__) == ["label"]
    assert models["Tag"].__rules__.kinds_for("label") == [
        RuleKind.PRIMITIVE_TYPE
    ]


def test_empty_document_declares_no_models():
    assert decl.load(io.StringIO("")) == {}


@pytest.mark.parametrize(
    ("document", "message"),
    [
        ("- not a mapping\n", "'models' key"),
        ("models:\n  A:\n    properties:\n      x: {type: Nope}\n", "Nope"),
        (
            "models:\n  A:\n    properties:\n"
            "      x: {type: Numeric, primitive: complex}\n",
            "complex",
        ),
    ],
)
def test_malformed_schemas_are_rejected(document, message):
    with pytest.raises(ValueError, match=message):
        decl.load(io.StringIO(document))


def test_malformed_range_tag_is_rejected():
    document = "models:\n  A:\n    properties:\n      x: {length: !range 5}\n"

    with pytest.raises(ValueError, match="Malformed range"):
        decl.load(io.StringIO(document))


def test_unbounded_range_tag_without_upper_bound():
    data = yaml.load("!range 2..", Loader=decl.SchemaLoader)

    assert data == LengthRange(2, math.inf)


def test_dumped_rules_can_be_read_back(shop):
    dumped = decl.dump_rules({"Customer": shop["Customer"].__rules__})

    data = yaml.load(dumped, Loader=decl.SchemaLoader)
    nickname = [i for i in data["Customer"] if i["property"] == "nickname"]
    assert nickname[0] == {
        "kind": "length",
        "property": "nickname",
        "options": {"allow_nil": True, "within": LengthRange(3, 20)},
    }
    email, handle = [i for i in data["Customer"] if i["kind"] == "format"]
    assert email["options"]["with"] == "email"
    assert handle["options"]["with"].pattern == "^[a-z_]+$"
