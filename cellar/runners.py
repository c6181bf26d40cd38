#===============================================================================
#  Cellar_Cockpit | runners.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Picks a default engine (wine runner) out of the detected candidates.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from typing import Optional, Sequence

from .models import BottleTemplate, RunnerTier, WineRunner

# Tiers tried in order when nothing more specific is asked for.
PREFERRED_TIERS = (RunnerTier.GPTK, RunnerTier.WHISKY_GPTK)


def find_runner(runners: Sequence[WineRunner], path: str) -> Optional[WineRunner]:
    for r in runners:
        if r.path == path:
            return r
    return None


def default_runner(
    runners: Sequence[WineRunner],
    template: Optional[BottleTemplate] = None,
) -> Optional[WineRunner]:
    """Return the runner to preselect, or None if nothing was detected.

    Resolution order:
      1) first runner of the template's recommended tier
      2) first GPTK runner
      3) first WhiskyGPTK runner
      4) first detected runner
    """
    if not runners:
        return None

    tiers = list(PREFERRED_TIERS)
    if template is not None and template.recommended_runner is not None:
        tiers.insert(0, template.recommended_runner)

    for tier in tiers:
        for r in runners:
            if r.runner_type == tier:
                return r
    return runners[0]


def describe_runner(runner: WineRunner) -> str:
    caps = []
    if runner.supports_d3dmetal:
        caps.append("D3DMetal")
    if runner.supports_esync:
        caps.append("ESync")
    parts = [runner.runner_type.value]
    if runner.version:
        parts.append(runner.version)
    if caps:
        parts.append(", ".join(caps))
    return " • ".join(parts)
