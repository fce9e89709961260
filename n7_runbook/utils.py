from datetime import datetime


def print_banner(service_name: str, version: str = "1.0.0", step_count: int = 0, progress: int = 0):
    """
    Print the Naga-7 runbook startup banner.

    Args:
        service_name: Name of the service starting up (e.g., "N7-Runbook")
        version: Version number of the service (default: "1.0.0")
        step_count: Number of steps in the loaded catalog
        progress: Completion percentage restored from persisted progress
    """
    banner = r"""
   _   _ _____      ____              _                 _
  | \ | |___  |    |  _ \ _   _ _ __ | |__   ___   ___ | | __
  |  \| |  / /_____| |_) | | | | '_ \| '_ \ / _ \ / _ \| |/ /
  | |\  | / /|_____|  _ <| |_| | | | | |_) | (_) | (_) |   <
  |_| \_|/_/       |_| \_\\__,_|_| |_|_.__/ \___/ \___/|_|\_\
"""

    current_year = datetime.now().year

    print(banner)

    print("=" * 80)
    print(f"  NAGA-7 (N7) - Incident Rescue Runbook")
    print("=" * 80)
    print(f"  Service:        {service_name}")
    print(f"  Version:        {version}")
    print(f"  Started:        {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("-" * 80)
    print(f"  Runbook steps:  {step_count}")
    print(f"  Restored:       {progress}% complete")
    print("-" * 80)
    print(f"  This runbook records operator-asserted progress only.")
    print(f"  It never executes remediation commands itself.")
    print("-" * 80)
    print(f"  License:        Apache License 2.0")
    print(f"  Copyright:      © {current_year} Naga-7 Project Contributors")
    print("=" * 80)
    print()
