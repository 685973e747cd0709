# SPDX-FileCopyrightText: Copyright DB InfraGO AG
# SPDX-License-Identifier: Apache-2.0
"""The autovalidate package."""

from importlib import metadata

try:
    __version__ = metadata.version("autovalidate")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+unknown"
del metadata

from .inference import *
from .schema import Model as Model
from .schema import Property as Property
