from typing import Optional

import httpx
from selectolax.parser import HTMLParser

from prehrastream.config.settings import settings
from prehrastream.utils.http_client import SITE_HEADERS
from prehrastream.utils.logger import scraper_logger

# ===========================
# Constants
# ===========================
LOGIN_FORM_SELECTOR = 'form[action*="loginForm"], input[name="_do"][value="login-loginForm-submit"]'
DOWNLOAD_PARAM = "do=download"

# ===========================
# Premium Session
# ===========================
# Logged-in session with its own cookie jar, passed explicitly to the extractor
class PremiumSession:

    def __init__(self, email: str, password: str, base_url: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.email = email
        self.password = password
        self.base_url = base_url or settings.PREHRAJTO_URL
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(float(settings.HTTP_TIMEOUT)),
            headers=SITE_HEADERS,
            proxy=settings.PROXY_URL or None
        )
        self.logged_in = False

    async def login(self) -> bool:
        try:
            response = await self.client.post(
                f"{self.base_url}/",
                data={
                    "email": self.email,
                    "password": self.password,
                    "remember": "on",
                    "_do": "login-loginForm-submit"
                },
                headers={"Referer": f"{self.base_url}/"},
                follow_redirects=True
            )

            if response.status_code != 200:
                scraper_logger.error(f"Premium login HTTP {response.status_code}")
                return False

            still_anonymous = HTMLParser(response.text).css_first(LOGIN_FORM_SELECTOR) is not None
            self.logged_in = bool(self.client.cookies) and not still_anonymous
            scraper_logger.debug(f"Premium login {'succeeded' if self.logged_in else 'rejected'}")
            return self.logged_in

        except Exception as e:
            scraper_logger.error(f"Premium login error: {type(e).__name__}")
            return False

    async def download_url(self, detail_url: str) -> Optional[str]:
        if not self.logged_in:
            return None

        separator = "&" if "?" in detail_url else "?"
        try:
            response = await self.client.get(
                f"{detail_url}{separator}{DOWNLOAD_PARAM}",
                headers={"Referer": detail_url},
                follow_redirects=False
            )
        except Exception as e:
            scraper_logger.error(f"Premium download error: {type(e).__name__}")
            return None

        location = response.headers.get("location")
        if response.is_redirect and location:
            target = response.url.join(location)
            # Redirects back to the site mean the session cookie is gone
            if target.host == httpx.URL(self.base_url).host:
                scraper_logger.debug(f"Premium session expired, redirected to {target.path}")
                self.logged_in = False
                return None

            scraper_logger.debug(f"Premium redirect for {detail_url}")
            return str(target)

        scraper_logger.debug(f"No premium redirect for {detail_url} (HTTP {response.status_code})")
        return None

    async def close(self):
        await self.client.aclose()


# ===========================
# Session Factory
# ===========================
_premium_session: Optional[PremiumSession] = None


async def get_premium_session() -> Optional[PremiumSession]:
    global _premium_session
    if not settings.has_premium_credentials:
        return None

    if _premium_session is None:
        _premium_session = PremiumSession(settings.PREHRAJTO_EMAIL, settings.PREHRAJTO_PASSWORD)

    if not _premium_session.logged_in:
        await _premium_session.login()

    return _premium_session if _premium_session.logged_in else None


async def close_premium_session():
    global _premium_session
    if _premium_session is not None:
        await _premium_session.close()
        _premium_session = None
