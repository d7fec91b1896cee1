"""
Token verification with python-jose using a key lookup callback.
"""

from typing import Any, Dict

from jose import jwt

from .client import KeyFunc


def decode_token(token: str, key_func: KeyFunc, **options: Any) -> Dict[str, Any]:
    """Verify ``token`` with the key chosen by ``key_func`` and return its claims.

    ``key_func`` receives the unverified header. The only algorithm accepted by
    the signature check is the one the header declares, which ``key_func`` has
    already matched against the key. Remaining keyword arguments (``audience``,
    ``issuer``, ``options``...) go to ``jose.jwt.decode``.
    """
    header = jwt.get_unverified_header(token)
    key = key_func(header)
    return jwt.decode(token, key, algorithms=[header.get("alg")], **options)
