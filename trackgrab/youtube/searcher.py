"""
YouTube Music search for keyword queries

Runs one search per query through ytmusicapi and returns the top match as a
TrackReference pointing at the YouTube watch URL. No scoring and no fallback
queries: the first result wins.
"""

from typing import Any, Dict, List, Optional

from ytmusicapi import YTMusic

from ..config.settings import Settings, get_settings
from ..exceptions import ResolutionError
from ..models import TrackReference
from ..utils.logger import get_logger


WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


class YouTubeSearcher:
    """
    Keyword search against YouTube Music

    The YTMusic client is created on first use and works without
    authentication, which is enough for public search.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)
        self._ytmusic: Optional[YTMusic] = None

        self.search_filter = self.settings.youtube.search_filter or None
        self.search_limit = int(self.settings.youtube.search_limit)

    @property
    def ytmusic(self) -> YTMusic:
        """
        YouTube Music API client with lazy initialization

        Raises:
            ResolutionError: If the client cannot be initialized
        """
        if not self._ytmusic:
            try:
                self._ytmusic = YTMusic()
                self.logger.info("YouTube Music API initialized")
            except Exception as e:
                raise ResolutionError(f"YouTube Music initialization failed: {e}", details={'original_error': e})
        return self._ytmusic

    def _search(self, query: str) -> List[Dict[str, Any]]:
        try:
            results = self.ytmusic.search(query=query, filter=self.search_filter, limit=self.search_limit)
        except ResolutionError:
            raise
        except Exception as e:
            # ytmusicapi raises plain exceptions for HTTP and parsing failures
            raise ResolutionError(f"Error searching YouTube: {e}", details={'query': query, 'original_error': e})

        self.logger.debug(f"YTMusic search '{query}' returned {len(results or [])} results")
        return [r for r in results or [] if r.get('videoId')]

    def search_top_match(self, keywords: str) -> Optional[TrackReference]:
        """
        Resolve free-text keywords to the top search result

        Args:
            keywords: Search terms, e.g. "never gonna give you up"

        Returns:
            TrackReference for the first result, None when nothing was found

        Raises:
            ResolutionError: If the search service fails
        """
        results = self._search(keywords)
        if not results:
            self.logger.console_error("No search results found for the given keyword(s).")
            return None

        top = results[0]
        self.logger.debug(f"Top match for '{keywords}': {top.get('title')} ({top['videoId']})")
        return TrackReference(
            locator=WATCH_URL.format(video_id=top['videoId']),
            title=top.get('title'),
        )
