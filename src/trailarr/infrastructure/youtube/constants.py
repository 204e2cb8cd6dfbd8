"""YouTube endpoints, client profiles and request headers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

BASE_URL = "https://www.youtube.com"
PLAYER_API_URL = f"{BASE_URL}/youtubei/v1/player"
WATCH_URL = f"{BASE_URL}/watch"

# Bypasses the EU cookie-consent interstitial on the watch page.
CONSENT_COOKIE = "CONSENT=PENDING+999"

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.5 Safari/605.1.15"
)

ANDROID_CLIENT_VERSION = "19.09.37"
ANDROID_USER_AGENT = (
    f"com.google.android.youtube/{ANDROID_CLIENT_VERSION} (Linux; U; Android 14) gzip"
)


@dataclass(frozen=True)
class InnertubeClient:
    """Client identity sent in ``context.client`` of a player request."""

    strategy_name: str
    client_name: str
    client_version: str
    user_agent: str | None = None
    extra_client_fields: dict[str, Any] = field(default_factory=dict)
    third_party: dict[str, Any] = field(default_factory=dict)

    def context(self) -> dict[str, Any]:
        ctx: dict[str, Any] = {
            "client": {
                "clientName": self.client_name,
                "clientVersion": self.client_version,
                **self.extra_client_fields,
                "hl": "en",
                "gl": "US",
            },
        }
        if self.third_party:
            ctx["thirdParty"] = dict(self.third_party)
        return ctx


# Mobile client known to receive un-ciphered direct format URLs.
ANDROID_CLIENT = InnertubeClient(
    strategy_name="innertube_android",
    client_name="ANDROID",
    client_version=ANDROID_CLIENT_VERSION,
    user_agent=ANDROID_USER_AGENT,
    extra_client_fields={"androidSdkVersion": 34},
)

# Embedded TV player; serves some age-gated videos that allow embedding.
EMBEDDED_CLIENT = InnertubeClient(
    strategy_name="innertube_embedded",
    client_name="TVHTML5_SIMPLY_EMBEDDED_PLAYER",
    client_version="2.0",
    third_party={"embedUrl": f"{BASE_URL}/"},
)

INNERTUBE_CLIENTS: dict[str, InnertubeClient] = {
    client.strategy_name: client for client in (ANDROID_CLIENT, EMBEDDED_CLIENT)
}
