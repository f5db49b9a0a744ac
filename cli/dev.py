"""Dev server launcher.

Usage:
    dev                      # check dependencies, then serve with reload
    dev --skip-health-check  # serve without waiting for sibling services
"""

import argparse
import os


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Hackathon Core dev server")
    parser.add_argument(
        "--skip-health-check",
        action="store_true",
        help="Do not wait for the identity service, notification service and database",
    )
    args = parser.parse_args()

    if args.skip_health_check:
        os.environ["STARTUP_HEALTH_CHECK_ENABLED"] = "false"

    from app.main import run

    run()


if __name__ == "__main__":
    main()
