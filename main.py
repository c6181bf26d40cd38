#===============================================================================
#  Cellar_Cockpit  |  Bottle & App Launcher
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-10-19
#  Last Update : 2026-10-19
#
#  Summary
#  -------
#  Desktop front end for a Wine bottle manager. Talks to the local cellar
#  backend over HTTP and presents bottles and their apps as tiles:
#    - Bottles: create (templates + engine), rename, cover, delete
#    - Apps: pinned & priority first, everything else detected after
#    - Engine deployment and DirectX repair as background tasks
#    - Activity log of everything the launcher did
#
#  Settings
#  --------
#    ./cellar_state.json        -> backend url, timeouts, last opened bottle
#    ./.cellar/logs/            -> cellar.log + activity.log
#    CELLAR_BACKEND_URL         -> overrides the backend url
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

import sys

from cellar.app import run

if __name__ == "__main__":
    sys.exit(run())
