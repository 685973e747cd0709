# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
"""Typed properties and models that infer their own validation rules."""

from ._model import *
from ._model import __all__ as _all1
from ._properties import *
from ._properties import __all__ as _all2

__all__ = [*_all1, *_all2]
