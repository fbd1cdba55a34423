import logging
import xml.etree.ElementTree as ET

import requests

from steamcondenser.errors import FetchError

logger = logging.getLogger(__name__)


class CommunityFetcher:
    """
    Retrieves documents from the Steam Community over HTTP. Requests block until they complete
    or the timeout elapses. Failed requests are not retried.
    """
    timeout = 30.0
    user_agent = 'steam-condenser-py'

    def __init__(self, session: requests.Session = None):
        self.session = session if session is not None else requests.Session()

    def _get(self, url) -> requests.Response:
        logger.debug("fetching %s", url)
        try:
            response = self.session.get(url, timeout=float(self.timeout),
                                        headers={'User-Agent': self.user_agent})
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError("Could not retrieve %s: %s" % (url, e)) from e
        return response

    def fetch_text(self, url) -> str:
        return self._get(url).text

    def fetch_xml(self, url) -> ET.Element:
        response = self._get(url)
        try:
            return ET.fromstring(response.content)
        except ET.ParseError as e:
            raise FetchError("Could not parse the XML document at %s: %s" % (url, e)) from e

    def close(self):
        self.session.close()
