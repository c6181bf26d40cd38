#===============================================================================
#  Cellar_Cockpit | errors.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Error types shared by the controllers.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations


class BackendError(RuntimeError):
    """A backend call was rejected (network, process or validation failure)."""


class PreconditionError(RuntimeError):
    """An operation was requested in a state that does not allow it.

    Raised locally, before anything is sent to the backend.
    """
