from abc import abstractmethod
from typing import Any

from shared.clients.rag.models.Scroll import ScrollResult
from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class RAGClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "rag"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_scroll(self) -> str:
        """
        Returns the endpoint path for scroll requests.

        Returns:
            str: The endpoint path for scroll requests (e.g. "/collections/legal_docs/points/scroll")

        Raises:
            NotImplementedError: If the method is not implemented in a subclass.
        """
        pass

    @abstractmethod
    def get_scroll_payload(self, with_payload: bool | list | dict, with_vector: bool | list, limit: int | None = None, offset: str | int | None = None) -> dict:
        """
        Returns the payload for a scroll request to the RAG backend.

        Args:
            with_payload (bool | list | dict): Whether to include the payload, or which payload fields to include.
            with_vector (bool | list): Whether to include the vector, or which vector fields to include.
            limit (int | None): The maximum number of points to return.
            offset (str | int | None): Pagination cursor returned by the previous scroll page.
                                       None means start from the beginning.

        Returns:
            dict: The payload for the scroll request.
        """
        pass

    @abstractmethod
    def extract_next_page_offset(self, raw_response: dict) -> str | int | None:
        """
        Extracts the pagination cursor for the next scroll page from a raw response.

        Args:
            raw_response (dict): The normalized JSON response from the scroll endpoint.

        Returns:
            str | int | None: The cursor for the next page, or None if this was the last page.
        """
        pass

    @abstractmethod
    def extract_scroll_content(self, raw_response: dict) -> dict:
        """
        Extracts the relevant content from a raw scroll response.

        Args:
            raw_response (dict): The normalized JSON response from the scroll endpoint.

        Returns:
            dict: A dict with keys "result", "status", "time".
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_scroll(self, with_payload: bool | list | dict = True, with_vector: bool | list = False, limit: int | None = None, offset: str | int | None = None) -> ScrollResult:
        """Scroll a single page from the collection.

        To retrieve all points across several pages use do_scroll_all() instead.

        Args:
            with_payload (bool | list | dict): Whether to include the payload, or which payload fields to include.
            with_vector (bool | list): Whether to include the vector.
            limit (int | None): The maximum number of points to return per page.
            offset (str | int | None): Cursor from the previous page's next_page_offset.

        Returns:
            ScrollResult: The page, including next_page_offset when further pages are available.

        Raises:
            UpstreamError: If the scroll request fails in any way.
        """
        raw_response = await self.do_json_request(
            endpoint=self._get_endpoint_scroll(),
            payload=self.get_scroll_payload(with_payload, with_vector, limit, offset),
        )
        if not isinstance(raw_response, dict):
            raw_response = {}
        scroll_content = self.extract_scroll_content(raw_response=raw_response)
        return ScrollResult(
            result=scroll_content.get("result", []),
            status=scroll_content.get("status", "ok"),
            time=scroll_content.get("time", 0),
            next_page_offset=self.extract_next_page_offset(raw_response),
        )

    async def do_scroll_all(self, page_size: int, max_pages: int, with_payload: bool | list | dict = True, with_vector: bool | list = False) -> ScrollResult:
        """Scroll through the collection page by page, up to max_pages.

        The loop follows next_page_offset and stops when the backend reports no
        further cursor, when a page comes back empty, or when the page ceiling is
        reached. In the last case the result is flagged as truncated so callers
        can tell an incomplete scan from a complete one.

        Args:
            page_size (int): Number of points requested per page.
            max_pages (int): Upper bound on the number of scroll calls.
            with_payload (bool | list | dict): Whether to include the payload, or which fields.
            with_vector (bool | list): Whether to include the vector in each point.

        Returns:
            ScrollResult: All collected points. next_page_offset carries the cursor
                          that was not followed when truncated, else None.

        Raises:
            UpstreamError: If any page request fails. Points already collected are discarded.
        """
        all_points: list[Any] = []
        offset: str | int | None = None
        pages = 0
        truncated = False
        while True:
            page_result = await self.do_scroll(
                with_payload=with_payload,
                with_vector=with_vector,
                limit=page_size,
                offset=offset,
            )
            pages += 1
            all_points.extend(page_result.result)
            self.logging.debug(
                "Fetched RAG points page %d from %s, total points so far: %d",
                pages, self.get_engine_name(), len(all_points),
            )
            offset = page_result.next_page_offset
            if offset is None or offset == "" or not page_result.result:
                offset = None
                break
            if pages >= max_pages:
                truncated = True
                break

        if truncated:
            self.logging.warning(
                "Scroll of %s stopped at the page ceiling (%d pages, %d points); the listing is incomplete.",
                self.get_engine_name(), pages, len(all_points),
                color="yellow",
            )
        return ScrollResult(
            result=all_points,
            status="ok",
            time=0,
            next_page_offset=offset,
            pages_fetched=pages,
            truncated=truncated,
        )
