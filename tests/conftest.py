# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
"""Global fixtures for pytest."""

import pathlib

import pytest

from autovalidate import inference

TEST_DATA = pathlib.Path(__file__).parent / "data"


class Schemas:
    shop = TEST_DATA.joinpath("schemas", "shop.yaml")
    unbounded = TEST_DATA.joinpath("schemas", "unbounded.yaml")


@pytest.fixture(autouse=True)
def auto_validations_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make sure the environment does not disable inference."""
    monkeypatch.delenv("AUTOVALIDATE_DISABLE", raising=False)


@pytest.fixture
def rules() -> inference.RuleSet:
    """An empty registration surface that records rules."""
    return inference.RuleSet()
