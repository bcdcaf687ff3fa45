"""
=============================================================================
CONTENT-ENCODING NEGOTIATION
=============================================================================

The client lists the encodings it can decode:

    Accept-Encoding: invalid-encoding, gzip

The server walks that list in order and picks the first token it has a
codec for. Matching is exact: "gzip" matches, "GZIP" and "gzip;q=1" do not.

    Accept-Encoding present?
        │
        ├── no  → send the body as is
        │
        └── yes → first supported token?
                    │
                    ├── found     → compress, add Content-Encoding
                    │
                    └── not found → EncodingMismatchError
                                    (caught by the serializer, body sent as is)

=============================================================================
"""

import gzip
from typing import Callable, Dict, Iterable, Optional, Tuple

from ..errors import EncodingMismatchError


Codec = Callable[[bytes], bytes]


def gzip_codec(data: bytes) -> bytes:
    """Compress a body with gzip."""
    return gzip.compress(data)


# Supported encodings, by the token clients use in Accept-Encoding
CODECS: Dict[str, Codec] = {
    "gzip": gzip_codec,
}


def negotiate(
    accepted: Iterable[str],
    codecs: Optional[Dict[str, Codec]] = None,
) -> Tuple[str, Codec]:
    """
    Pick the first accepted encoding we support.

    Args:
        accepted: Tokens from the request's Accept-Encoding header.
        codecs: Registry to choose from. Defaults to CODECS.

    Returns:
        (token, codec) for the chosen encoding.

    Raises:
        EncodingMismatchError: No token in `accepted` is supported.
    """
    codecs = CODECS if codecs is None else codecs
    accepted = list(accepted)

    for token in accepted:
        codec = codecs.get(token)
        if codec is not None:
            return token, codec

    raise EncodingMismatchError(f"No supported encoding in {accepted!r}")
