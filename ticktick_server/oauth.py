"""One-time OAuth helper for getting TickTick tokens.

Walks through the authorization-code flow: opens the TickTick consent
page, takes the code from the redirect, exchanges it for tokens and
prints the lines to add to .env. The server itself never calls this.

Usage:
    python -m ticktick_server.oauth             # authorization-code flow
    python -m ticktick_server.oauth --refresh   # swap TICKTICK_REFRESH_TOKEN for a new access token
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import webbrowser
from urllib.parse import parse_qs, urlencode, urlparse

import httpx

from ticktick_server.config import TickTickConfig
from ticktick_server.errors import AuthenticationError


AUTHORIZE_URL = "https://ticktick.com/oauth/authorize"
OAUTH_TOKEN_URL = "https://ticktick.com/oauth/token"
DEFAULT_REDIRECT_URI = "http://localhost:8000/callback"
OAUTH_SCOPE = "tasks:read tasks:write"
REQUEST_TIMEOUT = 30.0


def build_authorize_url(client_id: str, redirect_uri: str = DEFAULT_REDIRECT_URI, state: str | None = None) -> str:
    """URL of the TickTick consent page for this client."""
    query = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": OAUTH_SCOPE,
    }
    if state:
        query["state"] = state
    return f"{AUTHORIZE_URL}?{urlencode(query)}"


def extract_code(pasted: str) -> str | None:
    """Accept either the full redirect URL or the bare code."""
    pasted = pasted.strip()
    if not pasted:
        return None
    if "://" not in pasted:
        return pasted
    codes = parse_qs(urlparse(pasted).query).get("code")
    return codes[0] if codes else None


async def _token_request(form: dict, transport: httpx.AsyncBaseTransport | None = None) -> dict:
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=transport) as http:
        try:
            response = await http.post(
                OAUTH_TOKEN_URL,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(None, None, str(e) or type(e).__name__) from e

    data = None
    if response.status_code < 400:
        try:
            data = response.json()
        except ValueError:
            data = None
    if not isinstance(data, dict) or not data.get("access_token"):
        detail = response.text or "No access_token received"
        raise AuthenticationError(response.status_code, response.reason_phrase, detail)
    return data


async def exchange_code(
    client_id: str,
    client_secret: str,
    code: str,
    redirect_uri: str = DEFAULT_REDIRECT_URI,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Exchange an authorization code for access and refresh tokens."""
    return await _token_request(
        {
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
            "scope": OAUTH_SCOPE,
        },
        transport,
    )


async def refresh_access_token(
    client_id: str,
    client_secret: str,
    refresh_token: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Exchange a refresh token for a new access token."""
    return await _token_request(
        {
            "client_id": client_id,
            "client_secret": client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        },
        transport,
    )


def format_env_lines(tokens: dict, client_id: str, client_secret: str) -> str:
    lines = [f"TICKTICK_ACCESS_TOKEN={tokens['access_token']}"]
    if tokens.get("refresh_token"):
        lines.append(f"TICKTICK_REFRESH_TOKEN={tokens['refresh_token']}")
    lines.append(f"TICKTICK_CLIENT_ID={client_id}")
    lines.append(f"TICKTICK_CLIENT_SECRET={client_secret}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Get TickTick OAuth tokens for the MCP server")
    parser.add_argument("--client-id", help="OAuth client ID (default: TICKTICK_CLIENT_ID)")
    parser.add_argument("--client-secret", help="OAuth client secret (default: TICKTICK_CLIENT_SECRET)")
    parser.add_argument(
        "--redirect-uri",
        default=DEFAULT_REDIRECT_URI,
        help=f"Redirect URI registered for the app (default: {DEFAULT_REDIRECT_URI})",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Use TICKTICK_REFRESH_TOKEN to get a new access token instead",
    )
    parser.add_argument("--no-browser", action="store_true", help="Print the URL without opening a browser")
    args = parser.parse_args(argv)

    config = TickTickConfig.from_env()
    client_id = args.client_id or config.client_id
    client_secret = args.client_secret or config.client_secret
    if not client_id or not client_secret:
        print(
            "Error: TICKTICK_CLIENT_ID and TICKTICK_CLIENT_SECRET must be set "
            "in your .env file, the environment, or via --client-id/--client-secret",
            file=sys.stderr,
        )
        return 1

    try:
        if args.refresh:
            if not config.refresh_token:
                print("Error: TICKTICK_REFRESH_TOKEN is not set", file=sys.stderr)
                return 1
            tokens = asyncio.run(refresh_access_token(client_id, client_secret, config.refresh_token))
        else:
            auth_url = build_authorize_url(client_id, args.redirect_uri)
            print("Open this URL to authorize the app:\n")
            print(f"  {auth_url}\n")
            if not args.no_browser:
                webbrowser.open(auth_url)
            pasted = input("Paste the URL you were redirected to (or just the code): ")
            code = extract_code(pasted)
            if not code:
                print("Error: No authorization code received", file=sys.stderr)
                return 1
            tokens = asyncio.run(exchange_code(client_id, client_secret, code, args.redirect_uri))
    except AuthenticationError as e:
        print(f"Error getting tokens: {e}", file=sys.stderr)
        return 1

    print("\nAdd these to your .env file:\n")
    print(format_env_lines(tokens, client_id, client_secret))
    return 0


if __name__ == "__main__":
    sys.exit(main())
