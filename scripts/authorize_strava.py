#!/usr/bin/env python3
"""
Strava OAuth Authorization Script

Runs the authorization flow in the system browser and stores the resulting
token in STRAVA_TOKEN_FILE. Can also refresh, inspect or delete the stored
token.

Usage:
    python scripts/authorize_strava.py             # authorize
    python scripts/authorize_strava.py --status    # show token status
    python scripts/authorize_strava.py --refresh   # refresh stored token
    python scripts/authorize_strava.py --revoke    # delete stored token

Prerequisites:
    export STRAVA_CLIENT_ID="your_client_id"
    export STRAVA_CLIENT_SECRET="your_client_secret"
    export STRAVA_TOKEN_FILE="~/.strava/tokens.json"
    export STRAVA_REDIRECT_URI="http://localhost:8765/strava/callback"
"""

import argparse
import logging
import sys
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from strava_client import StravaClient, StravaConfig, StravaError
from strava_client.oauth import BrowserSessionTransport, FileTokenStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

AUTHORIZATION_TIMEOUT = 300


def build_client(open_browser: bool = True) -> StravaClient:
    """Build a client configured from the environment."""
    config = StravaConfig.from_env()
    return StravaClient(
        embedded_transport=BrowserSessionTransport(
            open_browser=open_browser, timeout=AUTHORIZATION_TIMEOUT
        )
    ).configure(config)


def authorize(client: StravaClient) -> int:
    """
    Run the authorization flow.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    if client.coordinator.is_authorized():
        logger.info("✅ Already authorized. Use --revoke to re-authorize.")
        return 0

    logger.info("Starting OAuth authorization flow...")
    try:
        token = client.authorize().result(timeout=AUTHORIZATION_TIMEOUT + 30)
    except StravaError as e:
        logger.error(f"❌ Authorization failed: {e}")
        return 1
    except FutureTimeoutError:
        logger.error("❌ Authorization timed out")
        return 1

    athlete = token.athlete
    name = f"{athlete.firstname} {athlete.lastname}".strip() if athlete else ""
    logger.info(f"✅ Authorization successful{' for ' + name if name else ''}!")
    return 0


def refresh(client: StravaClient) -> int:
    """Refresh the stored token."""
    token = client.token
    if token is None or not token.refresh_token:
        logger.error("❌ No refresh token stored. Run the authorization flow first.")
        return 1

    try:
        client.refresh_access_token(token.refresh_token).result()
    except StravaError as e:
        logger.error(f"❌ Token refresh failed: {e}")
        return 1

    logger.info("✅ Token refreshed")
    return 0


def status(client: StravaClient) -> int:
    """Print token status."""
    info = client.coordinator.get_status()
    if not info["authorized"]:
        print("Not authorized")
        return 1

    print("Authorized")
    print(f"  Expired:    {info['expired']}")
    print(f"  Expires at: {info['expires_at']}")
    if info["athlete_id"]:
        print(f"  Athlete:    {info['athlete_id']}")
    return 0


def revoke(client: StravaClient) -> int:
    """Delete the stored token file."""
    store = client.require_config().token_store
    if not isinstance(store, FileTokenStore):
        logger.info("Tokens are kept in memory; nothing to revoke")
        return 0

    if store.delete():
        logger.info(f"✅ Token file deleted: {store.token_file}")
    else:
        logger.info("No authorization found to revoke")
    return 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Strava OAuth authorization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Prerequisites:
  export STRAVA_CLIENT_ID='your_client_id'
  export STRAVA_CLIENT_SECRET='your_client_secret'
  export STRAVA_TOKEN_FILE='~/.strava/tokens.json'
        """,
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--status", action="store_true", help="Show token status")
    group.add_argument("--refresh", action="store_true", help="Refresh the stored token")
    group.add_argument("--revoke", action="store_true", help="Delete the stored token")
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't automatically open browser (display URL only)",
    )
    args = parser.parse_args()

    try:
        client = build_client(open_browser=not args.no_browser)
    except StravaError as e:
        logger.error(f"❌ Configuration error: {e}")
        return 1

    with client:
        if args.status:
            return status(client)
        if args.refresh:
            return refresh(client)
        if args.revoke:
            return revoke(client)
        return authorize(client)


if __name__ == "__main__":
    sys.exit(main())
