r"""Translation of a request descriptor into an ``httpx.Request``."""

from __future__ import annotations

__all__ = ["WireRequestBuilder"]

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from reqengine.descriptor import RequestDescriptor


class WireRequestBuilder:
    r"""Minimal builder turning a descriptor into a wire request.

    Body fragments are handled as follows:
    - no fragment: no body
    - a single non-text fragment: JSON when the content type contains
      ``json``, otherwise form-encoded if it is a mapping
    - text and bytes fragments: concatenated in order, text encoded with
      the descriptor's charset

    Example:
        ```pycon
        >>> import httpx
        >>> from reqengine.descriptor import RequestDescriptor
        >>> from reqengine.transport import WireRequestBuilder
        >>> descriptor = RequestDescriptor("https://example.com/items", method="post")
        >>> _ = descriptor.add_query("page", 2).add_body("a=").add_body(b"1")
        >>> with httpx.Client() as client:
        ...     request = WireRequestBuilder().build(descriptor, client)
        ...
        >>> request.method, str(request.url), request.content
        ('POST', 'https://example.com/items?page=2', b'a=1')

        ```
    """

    def build(self, descriptor: RequestDescriptor, client: httpx.Client) -> httpx.Request:
        headers = descriptor.headers.copy()
        if descriptor.content_type is not None and "Content-Type" not in headers:
            headers["Content-Type"] = descriptor.content_type
        return client.build_request(
            method=descriptor.method,
            url=descriptor.url,
            params=descriptor.query or None,
            headers=headers,
            timeout=descriptor.timeout,
            **self._body_kwargs(descriptor),
        )

    def _body_kwargs(self, descriptor: RequestDescriptor) -> dict[str, Any]:
        fragments = descriptor.body
        if not fragments:
            return {}
        if len(fragments) == 1 and not isinstance(fragments[0], (str, bytes)):
            fragment = fragments[0]
            if descriptor.content_type is not None and "json" in descriptor.content_type:
                return {"json": fragment}
            if isinstance(fragment, Mapping):
                return {"data": dict(fragment)}
        content = b"".join(
            fragment if isinstance(fragment, bytes) else str(fragment).encode(descriptor.charset)
            for fragment in fragments
        )
        return {"content": content}
