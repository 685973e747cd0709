# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0

import threading

import pytest

from autovalidate import inference, schema


def test_no_rules_are_inferred_while_suspended(rules):
    prop = schema.String(name="title", required=True)

    with inference.auto_validations_suspended():
        inference.infer_validations(prop, rules)

    assert rules == []


def test_unit_of_work_runs_suspended_and_returns_its_result(rules):
    prop = schema.String(name="title", required=True)

    def work():
        assert inference.auto_validations_disabled()
        inference.infer_validations(prop, rules)
        return 42

    result = inference.with_auto_validations_suspended(work)

    assert result == 42
    assert rules == []
    assert not inference.auto_validations_disabled()


def test_suspension_is_lifted_when_the_unit_of_work_fails():
    def work():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        inference.with_auto_validations_suspended(work)

    assert not inference.auto_validations_disabled()


def test_nested_suspension_restores_the_outer_state():
    with inference.auto_validations_suspended():
        with inference.auto_validations_suspended():
            pass
        assert inference.auto_validations_disabled()

    assert not inference.auto_validations_disabled()


def test_suspension_does_not_leak_into_other_threads():
    inside = threading.Event()
    release = threading.Event()
    observed = []

    def other_thread():
        inside.wait()
        observed.append(inference.auto_validations_disabled())
        release.set()

    thread = threading.Thread(target=other_thread)
    thread.start()
    with inference.auto_validations_suspended():
        inside.set()
        release.wait()
    thread.join()

    assert observed == [False]


def test_environment_variable_disables_inference(rules, monkeypatch):
    monkeypatch.setenv("AUTOVALIDATE_DISABLE", "1")
    prop = schema.String(name="title")

    inference.infer_validations(prop, rules)

    assert inference.auto_validations_disabled()
    assert rules == []


def test_models_defined_while_suspended_have_no_rules():
    def define():
        class Post(schema.Model):
            title = schema.String(required=True)

        return Post

    post = inference.with_auto_validations_suspended(define)

    assert post.__rules__ == []
