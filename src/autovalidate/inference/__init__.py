# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
"""Inference of validation rules from property metadata.

Instead of declaring every validation rule by hand, rules are derived
from the options that a property was defined with. A required property
gets a presence rule, a property with a ``length`` gets a length rule,
an integer property gets a numericality rule, and so on. See
:func:`infer_validations` for the full list of triggers.

The inferred rules are attached to a :class:`RegistrationSurface`,
usually the :class:`RuleSet` of a :class:`~autovalidate.schema.Model`.
"""

from ._infer import *
from ._infer import __all__ as _all1
from ._rules import *
from ._rules import __all__ as _all2

__all__ = [*_all1, *_all2]
